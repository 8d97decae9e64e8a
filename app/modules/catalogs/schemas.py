from pydantic import BaseModel, ConfigDict

class ServiceOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    service_id: str
    name: str
    letter: str
