from pydantic import BaseModel, ConfigDict, Field


class EchoOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    normal: str
    shouty: str
    character_count: int = Field(alias="characterCount")
    backwards: str


def transform(text: str) -> EchoOut:
    # counts and reverses code points, not UTF-16 units
    return EchoOut(
        normal=text,
        shouty=text.upper(),
        character_count=len(text),
        backwards=text[::-1],
    )
