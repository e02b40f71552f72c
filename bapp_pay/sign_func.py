"""
Подпись запросов BApp.
Строка для подписи: пары key=value& по ключам в порядке возрастания (без sign),
в конце app_secret=<секрет>. Подпись — md5 от строки в UTF-8, hex в нижнем регистре.
"""
import dataclasses
import hashlib
import hmac
from collections.abc import Mapping
from decimal import Decimal

import structlog

from bapp_pay.exceptions import SchemaError

logger = structlog.get_logger('bapp')

SIGN_KEY = 'sign'
SECRET_KEY = 'app_secret'


def param_value(key: str, value) -> str:
    """
    Привести значение поля к строке для подписи.
    Числа — целая часть в десятичной записи (дробная отбрасывается), строки — как есть.
    Остальные типы (bool, None, списки...) — SchemaError.
    """
    if isinstance(value, str):
        try:
            value.encode('UTF-8')
        except UnicodeEncodeError as err:
            raise SchemaError(key, value) from err
        return value
    if isinstance(value, bool):
        raise SchemaError(key, value)
    if isinstance(value, int):
        # int больше 4300 цифр: ValueError от лимита int -> str
        try:
            return str(value)
        except ValueError as err:
            raise SchemaError(key, value) from err
    if isinstance(value, (float, Decimal)):
        try:
            return str(int(value))
        except (ValueError, OverflowError) as err:
            raise SchemaError(key, value) from err
    raise SchemaError(key, value)


def convert_params(record) -> dict[str, str]:
    """Запись (dataclass или dict) -> словарь строковых параметров."""
    if dataclasses.is_dataclass(record) and not isinstance(record, type):
        items = dataclasses.asdict(record).items()
    elif isinstance(record, Mapping):
        items = record.items()
    else:
        raise SchemaError('<record>', record)
    return {str(key): param_value(str(key), value) for key, value in items}


def plain_text(params: Mapping, app_secret: str) -> str:
    keys = sorted(key for key in params if key != SIGN_KEY)
    plain = ''.join(f'{key}={param_value(key, params[key])}&' for key in keys)
    return f'{plain}{SECRET_KEY}={app_secret}'


def sign_params(params: Mapping, app_secret: str) -> str:
    """Подпись набора параметров (поле sign не участвует)."""
    plain = plain_text(params, app_secret)
    return hashlib.md5(plain.encode('UTF-8')).hexdigest()


def verify_params(params: Mapping, app_secret: str) -> bool:
    """
    Сверить поле sign с подписью, пересчитанной по остальным полям.
    Несовпадение или отсутствие sign — False, не исключение.
    """
    sign = params.get(SIGN_KEY)
    if not isinstance(sign, str):
        logger.debug('Bapp verify: нет поля sign', keys=sorted(params))
        return False
    expected = sign_params(params, app_secret)
    return hmac.compare_digest(expected.encode('UTF-8'), param_value(SIGN_KEY, sign).encode('UTF-8'))
