from pydantic import BaseModel, Field
from typing import Optional, Union

class ShiftTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    start_time: str = Field(..., description="HH:MM:SS")
    end_time: str = Field(..., description="HH:MM:SS")

class ShiftTypeOut(BaseModel):
    id: str
    name: str
    start_time: str
    end_time: str

class ScheduleAssign(BaseModel):
    staff_id: str
    shift_type_id: str
    # Lo valida parse_day_of_week (400 si no es 1..7)
    day_of_week: Union[int, str] = Field(..., description="1 = Monday ... 7 = Sunday")

class StaffScheduleOut(BaseModel):
    id: str
    staff_id: str
    staff_name: Optional[str] = None
    shift_type_id: str
    shift_name: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    day_of_week: int
    day_name: str
