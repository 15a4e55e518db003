from pydantic import BaseModel, ConfigDict


class CategoryDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    icon: str
    color: str


class CategoryStyle(BaseModel):
    model_config = ConfigDict(frozen=True)

    icon: str
    color: str
