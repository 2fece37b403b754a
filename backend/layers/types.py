from __future__ import annotations

from typing import Annotated, Any, Literal, TypeAlias, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


GeometryType = Literal["fill", "line", "circle"]

# Painter's order: a layer may only be stacked above layers of the same or a lower rank.
STACKING_RANK: dict[str, int] = {"fill": 0, "line": 1, "circle": 2}


class _Paint(BaseModel):
    # Keys are the engine's hyphenated paint property names.
    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)

    def to_engine(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class FillPaint(_Paint):
    color: str = Field(alias="fill-color")
    opacity: float = Field(default=1.0, ge=0.0, le=1.0, alias="fill-opacity")
    outline_color: str | None = Field(default=None, alias="fill-outline-color")


class LinePaint(_Paint):
    color: str = Field(alias="line-color")
    width: float = Field(default=1.0, ge=0.0, alias="line-width")
    opacity: float | None = Field(default=None, ge=0.0, le=1.0, alias="line-opacity")


class CirclePaint(_Paint):
    color: str = Field(alias="circle-color")
    radius: float = Field(default=5.0, ge=0.0, alias="circle-radius")
    opacity: float = Field(default=1.0, ge=0.0, le=1.0, alias="circle-opacity")
    stroke_color: str | None = Field(default=None, alias="circle-stroke-color")
    stroke_width: float | None = Field(default=None, ge=0.0, alias="circle-stroke-width")


class _LayerSpecBase(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(min_length=1)
    source: str = Field(min_length=1)

    def to_engine(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,  # type: ignore[attr-defined]
            "source": self.source,
            "paint": self.paint.to_engine(),  # type: ignore[attr-defined]
        }


class FillLayerSpec(_LayerSpecBase):
    type: Literal["fill"]
    paint: FillPaint


class LineLayerSpec(_LayerSpecBase):
    type: Literal["line"]
    paint: LinePaint


class CircleLayerSpec(_LayerSpecBase):
    type: Literal["circle"]
    paint: CirclePaint


LayerSpec: TypeAlias = Annotated[
    Union[FillLayerSpec, LineLayerSpec, CircleLayerSpec], Field(discriminator="type")
]

_LAYER_SPEC_ADAPTER: TypeAdapter[LayerSpec] = TypeAdapter(LayerSpec)


def parse_layer_spec(raw: dict[str, Any]) -> LayerSpec:
    """
    Validate a `{id, type, source, paint}` mapping into the matching layer variant.

    The paint keys have to belong to the declared geometry type, so
    `{"type": "fill", "paint": {"line-width": 2}}` is rejected.
    """
    return _LAYER_SPEC_ADAPTER.validate_python(raw)
