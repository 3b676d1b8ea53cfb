"""
Client-side data layer of the portal.

- errors: `PortalError` taxonomy (network, validation, not found, conflict)
- remote_api: async HTTP transport to the portal API (httpx)
- storage / local_store: persisted key-value table set used offline and as fallback
- fallback: primary/fallback provider composition for cases and catalog items
- facade: `DataAccessFacade`, one async surface per entity with audit side effects
- ranker: document-grounded context builder
- bundle: versioned backup bundle codec
- assistant / chat: LLM responder and the chat session that ties it together
- vacancies: job-search client
"""
