"""Schemas for the win-check trigger."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, post_dump, validate

from lottopool.services.prize_table import GameType


class CheckWinsRequestSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    game_type = fields.String(
        required=False,
        load_default=None,
        allow_none=True,
        validate=validate.OneOf([g.value for g in GameType]),
    )
    draw_date = fields.Date(required=False, load_default=None, allow_none=True, format="%Y-%m-%d")


class _ReportSchema(Schema):
    """Omits a null ``error`` key from dumped reports."""

    @post_dump
    def _drop_empty_error(self, data, **kwargs):  # type: ignore[no-untyped-def]
        if data.get("error") is None:
            data.pop("error", None)
        return data


class GameResultSchema(_ReportSchema):
    game_type = fields.String(required=True)
    draw_date = fields.String(required=True)
    tickets_checked = fields.Integer(required=True)
    wins_found = fields.Integer(required=True)
    prize_tiers = fields.Dict(keys=fields.String(), values=fields.Integer())
    jackpot_amount = fields.Float(allow_none=True)
    success = fields.Boolean(required=True)
    error = fields.String(allow_none=True)


class RunReportSchema(_ReportSchema):
    success = fields.Boolean(required=True)
    checked_count = fields.Integer(required=True)
    wins_found = fields.Integer(required=True)
    results = fields.List(fields.Nested(GameResultSchema))
    duration_ms = fields.Integer(required=True)
    error = fields.String(allow_none=True)
