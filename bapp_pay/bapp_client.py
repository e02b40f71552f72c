"""
Фасад для работы с BApp API.
- Создание заказа: QR-код и ссылка на оплату.
- Запрос заказа по order_id.
- Проверка подписи данных заказа, пришедших от шлюза.
Ключ, секрет и URL возврата/уведомлений передаются в конструктор
или берутся из настроек (переменные окружения BAPP_*).
"""
import time
from collections.abc import Callable, Mapping

import requests
import structlog

from bapp_pay import settings
from bapp_pay.exceptions import ProtocolError, TransportError
from bapp_pay.models import OrderDetail, OrderRequest, PayData
from bapp_pay.sign_func import SIGN_KEY, convert_params, sign_params, verify_params

logger = structlog.get_logger('bapp')

PAY_PATH = '/api/v2/pay'
QUERY_PATH = '/api/v2/order'
AMOUNT_TYPE = 'CNY'
SUCCESS_CODE = 200


class BappClient:
    """
    Клиент BApp API.
    Состояния нет: только учетные данные, хост и часы.
    """

    def __init__(
        self,
        app_key: str | None = None,
        app_secret: str | None = None,
        return_url: str | None = None,
        notify_url: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.app_key = app_key if app_key is not None else settings.BAPP_APP_KEY
        self.app_secret = app_secret if app_secret is not None else settings.BAPP_APP_SECRET
        self.return_url = return_url if return_url is not None else settings.BAPP_RETURN_URL
        self.notify_url = notify_url if notify_url is not None else settings.BAPP_NOTIFY_URL
        self.base_url = (base_url or settings.BAPP_HOST).rstrip('/')
        self.timeout = timeout if timeout is not None else settings.BAPP_TIMEOUT
        self._clock = clock

    def _signed(self, params: dict) -> dict[str, str]:
        """Привести значения к строкам и добавить sign."""
        params = convert_params(params)
        params[SIGN_KEY] = sign_params(params, self.app_secret)
        return params

    def _parse_response(self, resp: requests.Response, log) -> dict:
        """Проверить HTTP статус и конверт {code, msg, data}, вернуть data."""
        if resp.status_code != 200:
            log.warning('Bapp: HTTP статус != 200', status_code=resp.status_code)
            raise TransportError('StatusCode != 200', status_code=resp.status_code)
        try:
            ret = resp.json()
        except ValueError as err:
            log.warning('Bapp: ответ не JSON', raw=resp.text[:200])
            raise ProtocolError(f'Ответ не JSON: {err}') from err
        if not isinstance(ret, dict) or not isinstance(ret.get('code'), int):
            log.warning('Bapp: неожиданный формат ответа', data=ret)
            raise ProtocolError('Неожиданный формат ответа')
        if ret['code'] != SUCCESS_CODE:
            msg = ret.get('msg') or f'code {ret["code"]}'
            log.warning('Bapp: ошибка шлюза', code=ret['code'], msg=msg)
            raise ProtocolError(str(msg), code=ret['code'])
        return ret.get('data')

    def create_order(self, order_id: str, body: str, amount: int) -> PayData:
        """
        Создать заказ (POST /api/v2/pay).
        time — миллисекунды (целые секунды * 1000).
        Returns:
            PayData: qr_code и pay_url от шлюза.
        """
        log = logger.bind(order_id=order_id)
        params = self._signed({
            'order_id': order_id,
            'amount_type': AMOUNT_TYPE,
            'amount': amount,
            'time': int(self._clock()) * 1000,
            'app_key': self.app_key,
            'body': body,
            'return_url': self.return_url,
            'notify_url': self.notify_url,
        })
        url = f'{self.base_url}{PAY_PATH}'
        log.info('Bapp create_order: отправка', amount=params['amount'], url=url)
        try:
            resp = requests.post(
                url,
                json=params,
                headers={'Content-Type': 'application/json; charset=utf-8'},
                timeout=self.timeout,
            )
        except requests.RequestException as err:
            log.error('Bapp create_order: ошибка соединения', error=str(err))
            raise TransportError(str(err)) from err
        data = self._parse_response(resp, log)
        try:
            pay_data = PayData.from_dict(data)
        except ValueError as err:
            raise ProtocolError(str(err)) from err
        log.info('Bapp create_order: заказ создан', pay_url=pay_data.pay_url)
        return pay_data

    def query_order(self, order_id: str) -> OrderDetail:
        """
        Запрос заказа (GET /api/v2/order).
        time здесь в секундах, в отличие от create_order — так ждет шлюз.
        """
        log = logger.bind(order_id=order_id)
        params = self._signed({
            'order_id': order_id,
            'time': int(self._clock()),
            'app_key': self.app_key,
        })
        url = f'{self.base_url}{QUERY_PATH}'
        log.debug('Bapp query_order: запрос', url=url)
        try:
            resp = requests.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as err:
            log.error('Bapp query_order: ошибка соединения', error=str(err))
            raise TransportError(str(err)) from err
        data = self._parse_response(resp, log)
        try:
            detail = OrderDetail.from_dict(data)
        except ValueError as err:
            raise ProtocolError(str(err)) from err
        log.info('Bapp query_order', order_state=detail.order_state)
        return detail

    def verify_order_request(self, request: OrderRequest | Mapping) -> bool:
        """Проверить подпись данных заказа от шлюза. Несовпадение — False."""
        params = convert_params(request)
        passed = verify_params(params, self.app_secret)
        if not passed:
            logger.warning('Bapp verify_order_request: подпись не совпала', order_id=params.get('order_id'))
        return passed
