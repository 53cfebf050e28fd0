"""
posts_api.api

Routes FastAPI : posts (CRUD), health, statut système.
"""
