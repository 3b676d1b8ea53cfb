"""
Server-side persistence of the portal.

    config    settings and the SQLAlchemy engine
    entities  ORM tables (users, chats, docs, notifications, feedback, audit, cases, catalog)
    daos      per-table queries
    core      `@transactional` service functions used by `campus_portal.api`, plus seeding and backup
    helpers   session handling for `@transactional`
"""
