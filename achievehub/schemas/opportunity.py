from pydantic import BaseModel, field_validator

from .achievement import check_length


class OpportunityForm(BaseModel):
    title: str
    description: str

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        return check_length(v, "Title", 3, 200)

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        return check_length(v, "Description", 10, 2000)
