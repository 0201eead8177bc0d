from typing import Optional

from payrelay.errors import InvalidPlanError
from payrelay.models.plan import PlanConfig

# Цены в пайсах, совпадают с pricing_plans в БД
PLAN_CONFIGS: dict[str, PlanConfig] = {
    plan.id: plan
    for plan in (
        PlanConfig(
            id="pro",
            name="Pro",
            amount=100,
            currency="INR",
            description="Most popular choice"
        ),
        PlanConfig(
            id="pro_plus",
            name="Pro+",
            amount=100,
            currency="INR",
            description="For advanced learners"
        ),
        PlanConfig(
            id="ultra",
            name="Ultra",
            amount=100,
            currency="INR",
            description="Power users with live tutor features"
        ),
    )
}


def get_plan(plan_id: Optional[str]) -> Optional[PlanConfig]:
    """Возвращает тариф по идентификатору или None"""
    if not plan_id:
        return None
    return PLAN_CONFIGS.get(plan_id)


def require_plan(plan_id: Optional[str]) -> PlanConfig:
    """Возвращает тариф или бросает InvalidPlanError"""
    plan = get_plan(plan_id)
    if plan is None:
        raise InvalidPlanError(plan_id or "")
    return plan


def list_plans() -> list[PlanConfig]:
    """Все тарифы в порядке объявления"""
    return list(PLAN_CONFIGS.values())
