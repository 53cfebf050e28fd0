"""
posts_api.core

Package “cœur” de l’application : tout ce qui est transversal (cross-cutting concerns),
indépendant de la ressource posts.

- settings   : configuration (variables d’environnement, .env, URLs DB, pool, préfixe des routes).
- errors     : format d’erreur API uniforme + AppHTTPException.
- logging    : logs JSON enrichis du request_id.
- request_id : identifiant de corrélation par requête (ContextVar).
- security   : API key pour les routes destructives.
- rate_limit : limitation de débit en mémoire (optionnelle).
"""
