"""API routes converting policy triggers to and from trigger form state."""
from fastapi import APIRouter
from .schemas import DecodeRequest, DecodeResponse, EncodeRequest, EncodeResponse
from ..config import get_settings
from ..metrics import metrics
from ..rules.ast import Conjunction, parse_element
from ..rules.catalog import summarize
from ..rules.decoder import decode_conjunction
from ..rules.encoder import encode
from ..rules.errors import ParseError

router = APIRouter(prefix="/v1/rules", tags=["rules"])


@router.post("/decode", response_model=DecodeResponse)
async def decode_trigger(req: DecodeRequest):
    """Decode a trigger conjunction into triggers plus the elements the form does not show."""
    settings = get_settings()
    try:
        decoded = decode_conjunction(
            req.trigger,
            guard=settings.LEADING_GUARD,
            default_currency=settings.DEFAULT_CURRENCY,
        )
    except ParseError:
        metrics.rules_decoded_total.labels(outcome="parse_error").inc()
        raise

    metrics.rules_decoded_total.labels(outcome="ok").inc()
    metrics.conditions_unrecognised_total.inc(len(decoded.passthrough))
    return DecodeResponse(
        triggers=decoded.triggers,
        passthrough=[element.to_wire() for element in decoded.passthrough],
        summary=summarize(Conjunction.from_wire(req.trigger)),
    )


@router.post("/encode", response_model=EncodeResponse)
async def encode_trigger(req: EncodeRequest):
    """Encode triggers back into a trigger conjunction."""
    settings = get_settings()
    passthrough = [parse_element(raw) for raw in req.passthrough]
    conjunction = encode(req.triggers, settings.LEADING_GUARD, passthrough)
    metrics.rules_encoded_total.inc()
    return EncodeResponse(trigger=conjunction.to_wire())
