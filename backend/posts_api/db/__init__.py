"""
posts_api.db

Package base de données : connexion, session et migrations.

Contenu :
- base       : classe Base SQLAlchemy (metadata des tables).
- session    : engine async + pool, sessions AsyncSession pour FastAPI (Depends(get_db)).
- migrate    : exécution des migrations Alembic embarquées (au démarrage ou en CLI).
- migrations : scripts Alembic livrés avec le package (env.py + versions/).
"""
