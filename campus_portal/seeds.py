"""
Demo data shared by the server startup seed and the Local Store first-use seed.

Rows are camelCase dicts in the wire shape; timestamps are filled in by the
caller (`build_seed_users`, `build_seed_notifications`) so repeated seeding
produces the same ids.
"""

from datetime import datetime, timedelta

DEFAULT_PASSWORD = "password"
"""Password of every demo account and of legacy user rows lacking a hash."""

SEED_USERS = (
    {"id": "1", "email": "admin@bolashak.kz", "name": "Администратор системы", "role": "ADMIN"},
    {
        "id": "2",
        "email": "student@bolashak.kz",
        "name": "Иван Иванов",
        "role": "STUDENT",
        "department": "Информационные системы",
    },
    {
        "id": "3",
        "email": "profi@bolashak.kz",
        "name": "Д-р Ахметов",
        "role": "FACULTY",
        "department": "Кафедра права",
    },
)

SEED_NOTIFICATIONS = (
    {
        "id": "seed_n1",
        "userId": "2",
        "title": "Добро пожаловать в Bolashak AI",
        "message": "Здесь появятся важные уведомления: приказы, дедлайны, объявления кафедры.",
        "severity": "INFO",
        "createdBy": "SYSTEM",
        "ageHours": 0,
    },
    {
        "id": "seed_n2",
        "userId": "2",
        "title": "Приказ №124",
        "message": "Ознакомьтесь с новым приказом и подтвердите прочтение в личном кабинете.",
        "severity": "WARN",
        "createdBy": "SYSTEM",
        "ageHours": 20,
    },
)

DEFAULT_UI_ITEMS = (
    ("ui_abitur_cat_admission", "abitur", "category", None, "Поступление", None, 10),
    ("ui_abitur_cat_docs", "abitur", "category", None, "Документы", None, 20),
    ("ui_abitur_cat_deadlines", "abitur", "category", None, "Сроки", None, 30),
    ("ui_abitur_quick_admission_1", "abitur", "quick", "Поступление", "Как поступить?",
     "Расскажи, как поступить в университет: шаги, требования и контакты.", 10),
    ("ui_abitur_quick_docs_1", "abitur", "quick", "Документы", "Какие документы нужны?",
     "Перечисли документы для поступления: оригиналы/копии и сроки подачи.", 10),
    ("ui_abitur_quick_deadlines_1", "abitur", "quick", "Сроки", "Какие сроки приема?",
     "Назови ключевые сроки: прием документов, экзамены, зачисление.", 10),
    ("ui_abitur_ref_1", "abitur", "reference", None, "Справка: список документов",
     "Обычно требуется: удостоверение личности, аттестат/диплом, фото 3×4, медсправка (если требуется), "
     "заявление. Уточните в приемной комиссии.", 10),
    ("ui_kadr_topic_1", "kadr", "topic", None, "Справки студентам", None, 10),
    ("ui_kadr_topic_2", "kadr", "topic", None, "Кадровые документы", None, 20),
    ("ui_kadr_proc_1", "kadr", "procedure", "Справки студентам", "Справка с места учебы",
     "Подайте запрос, укажите ФИО, группу, цель справки. Срок подготовки зависит от регламента.", 10),
    ("ui_kadr_quick_1", "kadr", "quick", None, "Нужна справка с места учебы",
     "Мне нужна справка с места учебы. Какие данные вам нужны и сколько ждать?", 10),
    ("ui_nav_req_1", "nav", "request", None, "Справка об обучении", None, 10),
    ("ui_nav_req_2", "nav", "request", None, "Перевод/академический отпуск", None, 20),
    ("ui_nav_schedule_1", "nav", "schedule", None, "Как посмотреть расписание",
     "Откройте раздел «Расписание» в ЛК или уточните у куратора. Здесь можно хранить ссылки/инструкции.", 10),
    ("ui_career_dir_1", "career", "direction", None, "IT", None, 10),
    ("ui_career_dir_2", "career", "direction", None, "Юриспруденция", None, 20),
    ("ui_career_tip_1", "career", "resume_tip", None, "Совет по резюме",
     "Добавьте 2–3 достижения с цифрами (результат, срок, вклад).", 10),
    ("ui_room_type_1", "room", "request", None, "Заселение", None, 10),
    ("ui_room_type_2", "room", "request", None, "Бытовой вопрос", None, 20),
)
"""Catalog rows: (id, agentId, kind, groupKey, title, content, sort)."""


def build_seed_users(now: datetime, password_hash: str) -> list[dict]:
    """Demo user rows, all sharing `password_hash` and `joinedAt=now`."""
    return [{**user, "passwordHash": password_hash, "joinedAt": now.isoformat()} for user in SEED_USERS]


def build_seed_notifications(now: datetime) -> list[dict]:
    rows = []
    for seed in SEED_NOTIFICATIONS:
        row = {key: value for key, value in seed.items() if key != "ageHours"}
        row["isRead"] = False
        row["createdAt"] = (now - timedelta(hours=seed["ageHours"])).isoformat()
        rows.append(row)
    return rows


def build_ui_items(now: datetime) -> list[dict]:
    stamp = now.isoformat()
    return [
        {
            "id": item_id,
            "agentId": agent_id,
            "kind": kind,
            "groupKey": group_key,
            "title": title,
            "content": content,
            "meta": None,
            "sort": sort,
            "createdAt": stamp,
            "updatedAt": stamp,
        }
        for item_id, agent_id, kind, group_key, title, content, sort in DEFAULT_UI_ITEMS
    ]
