"""Création de la table posts.

Rôle (fonctionnel) :
- Crée la table `posts` (id auto-incrémenté, title, text, published).
- published vaut faux par défaut (un post n’est jamais publié à la création).

Revision ID: c4a1d2e3f5b6
Revises:
Create Date: 2026-10-18 10:12:31.204117
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# Identifiants Alembic
revision: str = "c4a1d2e3f5b6"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Application des changements de schéma."""
    op.create_table(
        "posts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("text", sa.String(), nullable=False),
        sa.Column("published", sa.Boolean(), nullable=False, server_default=sa.false()),
    )


def downgrade() -> None:
    """Retour arrière des changements de schéma."""
    op.drop_table("posts")
