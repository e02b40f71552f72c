"""
Клиент платежного шлюза BApp.
- Создание заказа (QR-код и ссылка на оплату).
- Запрос статуса заказа.
- Проверка подписи уведомлений от шлюза.
"""
from bapp_pay.bapp_client import BappClient
from bapp_pay.exceptions import BappPayError, ProtocolError, SchemaError, TransportError
from bapp_pay.models import OrderDetail, OrderRequest, PayData
from bapp_pay.sign_func import convert_params, sign_params, verify_params

__all__ = [
    'BappClient',
    'BappPayError',
    'TransportError',
    'ProtocolError',
    'SchemaError',
    'PayData',
    'OrderDetail',
    'OrderRequest',
    'sign_params',
    'verify_params',
    'convert_params',
]
