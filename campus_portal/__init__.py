"""
campus_portal: university digital-services portal.

Sub-packages
------------
- api: FastAPI router, wire models, JWT helpers
- database: settings, SQLAlchemy entities, DAOs and service functions
- crypt: password hashing
- client: Data Access Facade, Local Store, relevance ranker, backup codec,
  chat session and job-search client
"""
