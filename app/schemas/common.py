# app/schemas/common.py
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

# Largest id an INTEGER primary key holds on every supported database.
MAX_ROW_ID = 2**31 - 1


class ApiModel(BaseModel):
    """
    Base for request/response bodies.

    JSON keys are camelCase on the wire (productId, inStock, ...);
    snake_case field names are accepted on input too.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(ApiModel):
    """Plain acknowledgement for mutations without a body."""

    message: str
