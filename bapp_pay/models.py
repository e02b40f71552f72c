"""
Записи BApp. Имена полей совпадают с именами полей в JSON шлюза.
"""
import dataclasses
from dataclasses import dataclass

ORDER_STATE_WAITING = 0  # Ожидает оплаты
ORDER_STATE_PAID = 1  # Оплачен
ORDER_STATE_TIMEOUT = 2  # Закрыт по таймауту


def _from_dict(cls, data: dict):
    """
    Собрать dataclass из словаря ответа.
    Лишние ключи игнорируются, отсутствующие — нулевое значение ('' или 0).
    Значение не того типа — ValueError.
    """
    if not isinstance(data, dict):
        raise ValueError(f'{cls.__name__}: ожидался объект, получено {type(data).__name__}')
    values = {}
    for field in dataclasses.fields(cls):
        if field.name not in data:
            continue
        value = data[field.name]
        if field.type is int:
            valid = isinstance(value, int) and not isinstance(value, bool)
            if isinstance(value, float) and value.is_integer():
                value, valid = int(value), True
        else:
            valid = isinstance(value, str)
        if not valid:
            raise ValueError(f'{cls.__name__}.{field.name}: неверный тип {type(value).__name__}')
        values[field.name] = value
    return cls(**values)


@dataclass
class PayData:
    qr_code: str = ''
    pay_url: str = ''

    @classmethod
    def from_dict(cls, data: dict) -> 'PayData':
        return _from_dict(cls, data)


@dataclass
class OrderDetail:
    """Заказ из ответа на запрос статуса."""
    bapp_id: str = ''
    order_id: str = ''
    order_state: int = 0
    body: str = ''
    notify_url: str = ''
    order_ip: str = ''
    amount: int = 0
    amount_type: str = ''
    amount_btc: int = 0
    pay_time: int = 0
    create_time: int = 0
    order_type: int = 0
    app_key: str = ''
    extra: str = ''

    @classmethod
    def from_dict(cls, data: dict) -> 'OrderDetail':
        return _from_dict(cls, data)

    @property
    def is_paid(self) -> bool:
        return self.order_state == ORDER_STATE_PAID


@dataclass
class OrderRequest:
    """
    Уведомление шлюза о заказе (notify_url).
    sign — подпись шлюза по всем остальным полям.
    """
    bapp_id: str = ''
    order_id: str = ''
    order_state: int = 0
    order_type: int = 0
    amount: int = 0
    amount_type: str = ''
    amount_btc: int = 0
    order_fee: int = 0
    order_fee_btc: int = 0
    rate: int = 0
    create_time: int = 0
    pay_time: int = 0
    body: str = ''
    extra: str = ''
    order_ip: str = ''
    time: int = 0
    app_key: str = ''
    sign: str = ''

    @classmethod
    def from_dict(cls, data: dict) -> 'OrderRequest':
        return _from_dict(cls, data)

    @property
    def is_paid(self) -> bool:
        return self.order_state == ORDER_STATE_PAID
