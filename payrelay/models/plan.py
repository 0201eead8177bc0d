from pydantic import BaseModel, ConfigDict


class PlanConfig(BaseModel):
    """Тариф: цена в минимальных единицах валюты (пайсы)"""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    amount: int
    currency: str
    description: str
