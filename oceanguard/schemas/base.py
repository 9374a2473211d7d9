from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base for models serialized to the frontend (camelCase JSON keys)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
