"""
Обработка уведомлений BApp (notify_url).
Шлюз присылает JSON с данными заказа и полем sign.
Подпись проверяется по всем пришедшим полям, не только по известным OrderRequest.
"""
import json
from collections.abc import Mapping

import structlog

from bapp_pay.exceptions import ProtocolError
from bapp_pay.models import OrderRequest
from bapp_pay.sign_func import convert_params, verify_params

logger = structlog.get_logger('bapp')


def parse_notification(raw) -> dict:
    """Тело уведомления (bytes, str или dict) -> dict."""
    if isinstance(raw, Mapping):
        return dict(raw)
    try:
        if isinstance(raw, bytes):
            raw = raw.decode('UTF-8')
        payload = json.loads(raw)
    except (TypeError, ValueError) as err:
        raise ProtocolError(f'Уведомление не JSON: {err}') from err
    if not isinstance(payload, dict):
        raise ProtocolError('Уведомление должно быть JSON объектом')
    return payload


def verify_notification(payload: Mapping, app_secret: str) -> bool:
    return verify_params(convert_params(payload), app_secret)


def process_notification(raw, app_secret: str) -> tuple[bool, OrderRequest]:
    """
    Разобрать и проверить уведомление.
    Returns:
        (passed, order): passed=False — подпись не совпала, решение за вызывающим.
    """
    payload = parse_notification(raw)
    log = logger.bind(order_id=payload.get('order_id'))
    passed = verify_notification(payload, app_secret)
    try:
        order = OrderRequest.from_dict(payload)
    except ValueError as err:
        raise ProtocolError(str(err)) from err
    if passed:
        log.info('Bapp notify: подпись верна', order_state=order.order_state)
    else:
        log.warning('Bapp notify: подпись не совпала', app_key=order.app_key)
    return passed, order
