from pydantic import BaseModel, ConfigDict

class ProcessOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    process_name: str
    is_enabled: bool

class ProcessUpdate(BaseModel):
    is_enabled: bool
