"""
FastAPI Router: Auth • Users • Messages • Docs • Notifications • Feedback •
Audit • Cases • Catalog • Backup • Job-search proxy
=============================================================================

Purpose
-------
Defines the portal's remote data API. Every resource lives under ``/api`` and
speaks camelCase JSON; failures carry ``{"error": "<message>"}`` (rendered by
the exception handlers in `campus_portal.main`).

Key Notes
---------
- Input validation via Pydantic models in `campus_portal.api.models`.
- Auth cookie: `token` (JWT, subject = user id), set on login.
- Query parameters keep the camelCase names of the wire format (`userId`, `agentId`, ...).
- `/api/hh/vacancies` forwards to the external job-search API unchanged.
"""

import logging
from typing import Optional

import httpx
import pydantic
from fastapi import APIRouter, Body, Cookie, Depends, HTTPException, Query, Response

from campus_portal.api import models
from campus_portal.api.utils import create_access_token, verify_token
from campus_portal.client.errors import ValidationError as BundleValidationError
from campus_portal.database.config.config import settings
from campus_portal.database.core import backup, funcs

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")
"""Creates the FastAPI router in which we define its routes"""


def require(value: Optional[str], name: str) -> str:
    """Reject a missing or blank query parameter with 400."""
    if not value:
        raise HTTPException(status_code=400, detail=f"{name} required")
    return value


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------

@router.post('/auth')
async def auth(data: models.Credentials, response: Response, mode: str = 'login'):
    """Log in (default) or register (`?mode=register`).

    Behavior:
        - login: verifies credentials via `login_user`, sets the HttpOnly
          `token` cookie and returns the user; 404 unknown email, 401 wrong password.
        - register: creates a STUDENT account and returns it with 201;
          400 on missing name / short password, 409 on duplicate email.

    The password hash is never part of the response.
    """
    if mode == 'register':
        res = funcs.register_user(email=data.email, password=data.password, name=data.name)
        if not res['res']:
            raise HTTPException(status_code=res['status'], detail=res['detail'])
        response.status_code = 201
        return res['user']

    auth_result = funcs.login_user(email=data.email, password=data.password)
    if not auth_result['authenticated']:
        raise HTTPException(status_code=auth_result['status'], detail=auth_result['detail'])
    access_token = create_access_token({'sub': auth_result['user_details']['id']})
    response.set_cookie(
        key="token",
        value=access_token,
        httponly=True,
        secure=False,  # True in production
        samesite="lax",
    )
    return auth_result['user_details']


@router.post('/logout')
async def logout(response: Response):
    """Drop the auth cookie."""
    response.delete_cookie("token")
    return {'success': True}


@router.get('/me')
def get_me(token: str = Cookie(None)):
    """Return the user identified by the `token` cookie."""
    if not token:
        raise HTTPException(status_code=401, detail='Missing Token')
    user_id = verify_token(token)
    if not user_id:
        raise HTTPException(status_code=401, detail='Invalid or expired token')
    for user in funcs.get_users():
        if user['id'] == user_id:
            return user
    raise HTTPException(status_code=404, detail='user not found')


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

@router.get('/users')
def list_users():
    """All users (newest first) without password hashes."""
    return funcs.get_users()


@router.post('/users', status_code=201)
def create_user(data: models.UserCreate):
    return funcs.create_user(data=data)


@router.patch('/users')
def update_user(data: models.UserUpdate, id: Optional[str] = None):
    return funcs.update_user(user_id=require(id, 'id'), data=data)


# ---------------------------------------------------------------------------
# Messages
# ---------------------------------------------------------------------------

@router.get('/messages')
def list_messages(user_id: Optional[str] = Query(None, alias='userId'), agent_id: Optional[str] = Query(None, alias='agentId')):
    """One chat when `userId` and `agentId` are given, otherwise every message."""
    return funcs.get_messages(user_id=user_id, agent_id=agent_id)


@router.post('/messages', status_code=201)
def create_message(data: models.MessageCreate):
    return funcs.create_message(data=data)


@router.delete('/messages')
def clear_messages(user_id: Optional[str] = Query(None, alias='userId'), agent_id: Optional[str] = Query(None, alias='agentId')):
    deleted = funcs.clear_messages(user_id=require(user_id, 'userId'), agent_id=require(agent_id, 'agentId'))
    return {'success': True, 'deleted': deleted}


# ---------------------------------------------------------------------------
# Docs
# ---------------------------------------------------------------------------

@router.get('/docs')
def list_docs(user_id: Optional[str] = Query(None, alias='userId')):
    return funcs.get_docs(user_id=user_id)


@router.post('/docs', status_code=201)
def create_doc(data: models.DocCreate):
    return funcs.create_doc(data=data)


@router.put('/docs')
def update_doc(data: models.DocUpdate, id: Optional[str] = None):
    funcs.update_doc(doc_id=require(id, 'id'), data=data)
    return {'success': True}


@router.delete('/docs')
def delete_doc(id: Optional[str] = None):
    funcs.delete_doc(doc_id=require(id, 'id'))
    return {'success': True}


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

@router.get('/notifications')
def list_notifications(user_id: Optional[str] = Query(None, alias='userId'), mode: Optional[str] = None):
    """Notifications of a user (or all); `?mode=count` returns `{"count": <unread>}`."""
    if mode == 'count':
        return {'count': funcs.count_unread(user_id=require(user_id, 'userId'))}
    return funcs.get_notifications(user_id=user_id)


@router.post('/notifications', status_code=201)
def create_notification(payload: dict = Body(...), mode: Optional[str] = None):
    """Create one notification, or fan one out to every user with `?mode=broadcast`."""
    try:
        if mode == 'broadcast':
            return funcs.broadcast_notification(data=models.BroadcastRequest.model_validate(payload))
        return funcs.create_notification(data=models.NotificationCreate.model_validate(payload))
    except pydantic.ValidationError as e:
        raise HTTPException(status_code=400, detail=f"invalid notification: {e.errors()[0]['msg']}")


@router.patch('/notifications')
def mark_notification_read(id: Optional[str] = None):
    funcs.mark_notification_read(notification_id=require(id, 'id'))
    return {'success': True}


# ---------------------------------------------------------------------------
# Feedback & audit
# ---------------------------------------------------------------------------

@router.get('/feedback')
def list_feedback(message_id: Optional[str] = Query(None, alias='messageId')):
    return funcs.get_feedback(message_id=message_id)


@router.post('/feedback', status_code=201)
def upsert_feedback(data: models.FeedbackUpsert):
    """Insert or replace the rating of a message."""
    return funcs.upsert_feedback(data=data)


@router.get('/audit')
def list_audit():
    """Latest 500 audit events, newest first."""
    return funcs.get_audit()


@router.post('/audit', status_code=201)
def create_audit(data: models.AuditCreate):
    return funcs.create_audit(data=data)


@router.delete('/audit')
def clear_audit():
    return {'success': True, 'deleted': funcs.clear_audit()}


# ---------------------------------------------------------------------------
# Workflow cases & catalog
# ---------------------------------------------------------------------------

@router.get('/cases')
def list_cases(user_id: Optional[str] = Query(None, alias='userId'), agent_id: Optional[str] = Query(None, alias='agentId')):
    return funcs.get_cases(user_id=require(user_id, 'userId'), agent_id=require(agent_id, 'agentId'))


@router.post('/cases', status_code=201)
def create_case(data: models.CaseCreate):
    return funcs.create_case(data=data)


@router.patch('/cases')
def update_case(data: models.CaseUpdate, id: Optional[str] = None):
    return funcs.update_case(case_id=require(id, 'id'), data=data)


@router.get('/case-messages')
def list_case_messages(case_id: Optional[str] = Query(None, alias='caseId')):
    return funcs.get_case_messages(case_id=require(case_id, 'caseId'))


@router.post('/case-messages', status_code=201)
def create_case_message(data: models.CaseMessageCreate):
    return funcs.create_case_message(data=data)


@router.get('/ui-items')
def list_ui_items(
    agent_id: Optional[str] = Query(None, alias='agentId'),
    kind: Optional[str] = None,
    group_key: Optional[str] = Query(None, alias='groupKey'),
):
    return funcs.get_ui_items(agent_id=require(agent_id, 'agentId'), kind=require(kind, 'kind'), group_key=group_key)


# ---------------------------------------------------------------------------
# Backup & health
# ---------------------------------------------------------------------------

@router.get('/backup')
def export_backup():
    """Full bundle of the six backed-up tables."""
    return backup.export_backup()


@router.post('/backup')
def import_backup(bundle: dict = Body(...), mode: str = 'replace'):
    """Import a bundle (`?mode=replace|merge`); the bundle is validated as a whole first."""
    try:
        written = backup.import_backup(bundle=bundle, mode=mode)
    except BundleValidationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    except pydantic.ValidationError as e:
        raise HTTPException(status_code=400, detail=f"invalid bundle row: {e.errors()[0]['msg']}")
    return {'success': True, 'written': written}


@router.get('/health')
def health(init: bool = False):
    """DB ping; `?init=true` also creates missing tables."""
    backup.ping()
    if init:
        backup.init_tables()
    return {'ok': True, 'db': 'ok'}


# ---------------------------------------------------------------------------
# Job-search proxy
# ---------------------------------------------------------------------------

async def get_upstream_client():
    """HTTP client towards the external job-search API (overridden in tests)."""
    async with httpx.AsyncClient(base_url=settings.HH_API_BASE, timeout=settings.PORTAL_API_TIMEOUT) as client:
        yield client


@router.get('/hh/vacancies')
async def hh_vacancies(
    text: str = '',
    area: Optional[str] = None,
    page: Optional[int] = None,
    per_page: Optional[int] = None,
    client: httpx.AsyncClient = Depends(get_upstream_client),
):
    """Forward a vacancy search and relay the upstream status and body."""
    params = {'text': text}
    if area is not None:
        params['area'] = area
    if page is not None:
        params['page'] = page
    if per_page is not None:
        params['per_page'] = per_page
    try:
        upstream = await client.get(
            '/vacancies',
            params=params,
            headers={'Accept': 'application/json', 'User-Agent': settings.HH_USER_AGENT},
        )
    except httpx.HTTPError as e:
        logger.error("Job-search proxy failed: %s", e)
        raise HTTPException(status_code=502, detail='proxy_error')
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get('content-type', 'application/json; charset=utf-8'),
    )
