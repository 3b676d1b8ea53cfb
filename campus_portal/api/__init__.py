"""
API Package: FastAPI Router • Models • JWT Utils
================================================

Mission
-------
This package defines the portal's HTTP interface: the resource routes the
client-side Data Access Facade talks to, the pydantic data contracts shared by
both sides, and JWT cookie authentication.

Contents
--------
- fast_api
    FastAPI router (prefix ``/api``) with endpoints for:
      • Auth: login / register (`/auth`), logout, current user (`/me`)
      • Users, messages, docs, notifications (incl. broadcast and unread count)
      • Feedback (upsert by message), audit log
      • Workflow cases, case messages, agent catalog (`/ui-items`)
      • Backup export / import (`replace` | `merge`)
      • Health check and the job-search proxy (`/hh/vacancies`)

- models
    Pydantic data contracts:
      • Record models (User, Message, Notification, Doc, MessageFeedback,
        AuditEvent, WorkflowCase, CaseMessage, UiItem) in camelCase wire shape
      • Request bodies (`*Create`, `*Update`, Credentials, BroadcastRequest)
      • `StructuredValue` for `meta` / `payload` / audit `details`

- utils
    JWT helpers:
      • create_access_token(payload): issues signed JWTs with exp
      • verify_token(token): validates JWTs and extracts the subject

Operational Notes
-----------------
- Errors are rendered as ``{"error": "<message>"}`` by `campus_portal.main`.
- Security: Auth via HttpOnly `token` cookie (JWT). Never log secrets.
"""
