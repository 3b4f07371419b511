from pydantic import BaseModel, Field


class SubjectIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    code: str = Field(..., min_length=1, max_length=30)
    color: str | None = Field(default=None, max_length=30)
    description: str | None = None
    workload_minutes: int | None = Field(default=None, ge=0)


class SubjectUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=120)
    code: str | None = Field(default=None, min_length=1, max_length=30)
    color: str | None = Field(default=None, max_length=30)
    description: str | None = None
    workload_minutes: int | None = Field(default=None, ge=0)


class SubjectOut(BaseModel):
    id: int
    name: str
    code: str
    color: str | None
    description: str | None
    workload_minutes: int | None

    class Config:
        from_attributes = True


class SubjectRef(BaseModel):
    id: int
    name: str
    code: str

    class Config:
        from_attributes = True
