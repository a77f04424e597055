"""
Shared response shapes and the multipart form adapter.
"""

import json
import math
from typing import Any, Callable, Type, TypeVar

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class Pagination(BaseModel):
    total: int
    pages: int
    current_page: int
    per_page: int
    has_more: bool

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "Pagination":
        return cls(
            total=total,
            pages=math.ceil(total / limit) if limit else 0,
            current_page=page,
            per_page=limit,
            has_more=page * limit < total,
        )


class MessageResponse(BaseModel):
    message: str


def split_list(value: Any) -> Any:
    """Accept a JSON array, a comma separated string or a list for list fields."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.strip()
        if value.startswith("["):
            return json.loads(value)
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


def form_body(
    model: Type[ModelT],
    *,
    files: tuple[str, ...] = (),
    clearable: tuple[str, ...] = (),
) -> Callable:
    """
    Dependency that validates the non-file fields of a multipart form into `model`.

    Empty fields are treated as not provided, so update models only see the
    fields the client actually filled in. The exception is `clearable`: an
    empty value there is an explicit None (for example "no capacity limit").
    Validation failures go through the same handler as JSON bodies.
    """

    async def parse(request: Request) -> ModelT:
        form = await request.form()
        data: dict[str, Any] = {}
        for key in form.keys():
            if key in files:
                continue
            values = [v.strip() for v in form.getlist(key) if isinstance(v, str)]
            values = [v for v in values if v != ""]
            if not values:
                if key in clearable:
                    data[key] = None
                continue
            data[key] = values if len(values) > 1 else values[0]
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise RequestValidationError(exc.errors(include_url=False))

    return parse
