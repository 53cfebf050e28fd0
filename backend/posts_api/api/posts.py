from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from posts_api.core.errors import AppHTTPException
from posts_api.core.security import require_api_key
from posts_api.core.settings import settings
from posts_api.db.session import get_db
from posts_api.models.post import Post
from posts_api.schemas.posts import PostCreate, PostOut

"""
API Posts.

Rôle (fonctionnel) :
- create  : POST   /         -> insère un post, 201 + Location vers la ressource créée.
- list    : GET    /         -> liste des ids.
- read    : GET    /{id}     -> un post, 404 si absent.
- delete  : DELETE /{id}     -> 204 si exactement une ligne supprimée, 404 sinon.
- destroy : DELETE /         -> supprime tous les posts, 204.

Notes :
- Une session (connexion du pool) par requête via Depends(get_db), un seul appel ORM par route.
- Les erreurs base de données ne sont pas rattrapées ici : le handler global renvoie un 500 standard.
- delete / destroy sont protégés par l’API key (bypass en dev si API_KEY vide).
"""

router = APIRouter(tags=["posts"])
log = logging.getLogger("posts_api.posts")


def _location(post_id: int) -> str:
    return f"{settings.POSTS_PREFIX}/{post_id}"


@router.post("", response_model=PostOut, status_code=201)
async def create_post(payload: PostCreate, response: Response, db: AsyncSession = Depends(get_db)):
    # published n’est jamais lu depuis le client
    post = Post(title=payload.title, text=payload.text, published=False)

    db.add(post)
    await db.commit()
    await db.refresh(post)

    response.headers["Location"] = _location(post.id)
    log.info("post_created", extra={"post_id": post.id})
    return PostOut.model_validate(post)


@router.get("", response_model=List[int])
async def list_posts(db: AsyncSession = Depends(get_db)):
    ids = (await db.execute(select(Post.id).order_by(Post.id))).scalars().all()
    return list(ids)


@router.get("/{post_id}", response_model=PostOut)
async def read_post(post_id: int, db: AsyncSession = Depends(get_db)):
    post = (await db.execute(select(Post).where(Post.id == post_id))).scalars().first()
    if post is None:
        raise AppHTTPException(404, "NOT_FOUND", "Post introuvable", details={"id": post_id})
    return PostOut.model_validate(post)


@router.delete("/{post_id}", status_code=204, dependencies=[Depends(require_api_key)])
async def delete_post(post_id: int, db: AsyncSession = Depends(get_db)):
    result = await db.execute(delete(Post).where(Post.id == post_id))
    await db.commit()

    if result.rowcount != 1:
        raise AppHTTPException(404, "NOT_FOUND", "Post introuvable", details={"id": post_id})

    log.info("post_deleted", extra={"post_id": post_id})
    return Response(status_code=204)


@router.delete("", status_code=204, dependencies=[Depends(require_api_key)])
async def destroy_posts(db: AsyncSession = Depends(get_db)):
    result = await db.execute(delete(Post))
    await db.commit()

    log.info("posts_destroyed", extra={"affected": result.rowcount})
    return Response(status_code=204)
