"""
Agent catalogue and role gating.

Each agent is a chat assistant with a fixed system instruction. Agents with a
`min_role` are only available to users whose role sits at or above it in
`ROLE_TIERS`.
"""

from dataclasses import dataclass
from typing import Optional

ROLE_TIERS = ("STUDENT", "ALUMNI", "FACULTY", "ADMIN")


@dataclass(frozen=True)
class Agent:
    id: str
    name: str
    full_name: str
    description: str
    primary_func: str
    instruction: str
    min_role: Optional[str] = None


AGENTS: dict[str, Agent] = {
    agent.id: agent
    for agent in (
        Agent(
            id="abitur",
            name="AI-Abitur",
            full_name="Помощник абитуриента",
            description="Цифровой консультант для поступающих в Университет Болашак.",
            primary_func="Консультации по специальностям, перечню документов и условиям поступления в «Болашак».",
            instruction=(
                "Вы — AI-Abitur, официальный цифровой помощник приемной комиссии "
                "Кызылординского университета «Болашак». Помогайте абитуриентам."
            ),
        ),
        Agent(
            id="kadr",
            name="KadrAI",
            full_name="HR и Документы",
            description="Единое окно выдачи справок и документов для студентов и сотрудников.",
            primary_func="Справки с места учебы, транскрипты, приказы и кадровые вопросы.",
            instruction=(
                "Вы — KadrAI, универсальный ассистент офиса регистратора и отдела кадров. "
                "Ваша задача — помогать студентам получать справки (о наличии места учебы, "
                "транскрипты, характеристики) и сотрудникам с их кадровыми документами."
            ),
        ),
        Agent(
            id="nav",
            name="UniNav",
            full_name="Навигатор студента",
            description="Сопровождение по всем учебным процессам университета.",
            primary_func="Расписание, академические вопросы, справки об обучении.",
            instruction="Вы — UniNav, проводник студента Университета Болашак.",
            min_role="STUDENT",
        ),
        Agent(
            id="career",
            name="CareerNavigator",
            full_name="Карьерный консультант",
            description="Помощь в трудоустройстве выпускников и студентов.",
            primary_func="Поиск вакансий в Кызылорде, советы по резюме.",
            instruction="Вы — CareerNavigator, карьерный коуч Университета Болашак.",
        ),
        Agent(
            id="room",
            name="UniRoom",
            full_name="Помощник по общежитию",
            description="Решение бытовых и административных вопросов в Доме студентов.",
            primary_func="Заселение, заявки на ремонт, правила проживания.",
            instruction="Вы — UniRoom, цифровой помощник в общежитии.",
            min_role="STUDENT",
        ),
    )
}


def role_rank(role: str) -> int:
    """Position of `role` in `ROLE_TIERS`; -1 for unknown roles."""
    return ROLE_TIERS.index(role) if role in ROLE_TIERS else -1


def has_access(role: str, agent: Agent) -> bool:
    if agent.min_role is None:
        return True
    return role_rank(role) >= role_rank(agent.min_role)


def get_agent(agent_id: str) -> Agent:
    """
    Raises
    ------
    KeyError
        Unknown agent id.
    """
    return AGENTS[agent_id]


def available_agents(role: str) -> list[Agent]:
    return [agent for agent in AGENTS.values() if has_access(role, agent)]
