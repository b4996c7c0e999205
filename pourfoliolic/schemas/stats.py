from pydantic import BaseModel


class DrinkStatsResponse(BaseModel):
    total_drinks: int
    average_rating: float
    total_spending: float
    favorite_type: str | None
    drinks_by_type: dict[str, int]
