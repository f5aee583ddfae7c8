# schemas/package.py
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field, ConfigDict


class PackageCreate(BaseModel):
     name: str = Field(..., min_length=1, max_length=255)
     amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Package price (must be positive)")
     description: Optional[str] = None

     model_config = ConfigDict(
          json_schema_extra={"example": {"name": "Standard", "amount": 2500.00, "description": "Most popular package"}}
     )


class PackageUpdate(PackageCreate):
     pass


class PackageResponse(BaseModel):
     id: int
     name: str
     amount: Decimal
     description: Optional[str] = None
     created_at: Optional[datetime] = None

     model_config = ConfigDict(from_attributes=True)


class PackageListResponse(BaseModel):
     data: List[PackageResponse]
     total: int
     page: int = 1
     page_size: int = 20
