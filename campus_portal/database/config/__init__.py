"""
Settings and the SQLAlchemy engine of the portal.

Contents:
    - config: `settings`, every tunable of the server and of the client data layer (env / .env)
    - connection_engine: engine built from the `DB_*` settings and the `declarativeBase` of the entities
"""
