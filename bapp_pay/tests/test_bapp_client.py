"""
Тесты BappClient: сборка и подпись запросов, разбор ответов, ошибки.
HTTP не выполняется: requests.post / requests.get подменяются.
"""
from unittest import TestCase
from unittest.mock import Mock, patch

import requests

from bapp_pay.bapp_client import BappClient
from bapp_pay.exceptions import ProtocolError, SchemaError, TransportError
from bapp_pay.models import ORDER_STATE_PAID, OrderDetail, OrderRequest, PayData
from bapp_pay.sign_func import sign_params, verify_params

APP_KEY = 'your_app_key'
APP_SECRET = 'your_app_secret'
RETURN_URL = 'https://www.google.com'
NOTIFY_URL = 'https://www.google.com/callback'
NOW = 1560849482.796


def _client(**kwargs):
    return BappClient(APP_KEY, APP_SECRET, RETURN_URL, NOTIFY_URL, clock=lambda: NOW, **kwargs)


def _response(status_code=200, payload=None, json_error=False):
    resp = Mock()
    resp.status_code = status_code
    resp.text = 'not json' if json_error else str(payload)
    if json_error:
        resp.json.side_effect = ValueError('Expecting value')
    else:
        resp.json.return_value = payload
    return resp


ORDER_DETAIL = {
    'bapp_id': '20190618171802840b6a',
    'order_id': '1',
    'order_state': 1,
    'body': 'goods_name',
    'notify_url': 'https://bapi.app/api/experience/notify/test',
    'order_ip': '',
    'amount': 1,
    'amount_type': 'CNY',
    'amount_btc': 16,
    'pay_time': 1560859623468,
    'create_time': 1560849482796,
    'order_type': 2,
    'app_key': '4789e57f8629eb9e',
    'extra': '',
}


class TestCreateOrder(TestCase):

    @patch('bapp_pay.bapp_client.requests.post')
    def test_request_params_and_sign(self, mock_post):
        """Поля запроса, время в миллисекундах, подпись по всем полям кроме sign."""
        mock_post.return_value = _response(payload={
            'code': 200, 'msg': 'ok', 'data': {'qr_code': 'qr', 'pay_url': 'https://bapi.app/pay/1'},
        })
        result = _client().create_order('123456', 'BappTest', 500)

        self.assertEqual(result, PayData(qr_code='qr', pay_url='https://bapi.app/pay/1'))
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], 'https://bapi.app/api/v2/pay')
        self.assertEqual(kwargs['timeout'], 10.0)
        body = kwargs['json']
        self.assertEqual(
            set(body),
            {'order_id', 'amount_type', 'amount', 'time', 'app_key', 'body', 'return_url', 'notify_url', 'sign'},
        )
        self.assertEqual(body['order_id'], '123456')
        self.assertEqual(body['amount'], '500')
        self.assertEqual(body['amount_type'], 'CNY')
        self.assertEqual(body['time'], '1560849482000')
        self.assertEqual(body['app_key'], APP_KEY)
        self.assertEqual(body['return_url'], RETURN_URL)
        self.assertEqual(body['notify_url'], NOTIFY_URL)
        self.assertEqual(body['sign'], sign_params(body, APP_SECRET))
        self.assertTrue(verify_params(body, APP_SECRET))

    @patch('bapp_pay.bapp_client.requests.post')
    def test_gateway_error_code(self, mock_post):
        mock_post.return_value = _response(payload={'code': 400, 'msg': 'sign error', 'data': {}})
        with self.assertRaises(ProtocolError) as ctx:
            _client().create_order('1', 'body', 500)
        self.assertEqual(ctx.exception.code, 400)
        self.assertEqual(ctx.exception.message, 'sign error')
        self.assertEqual(str(ctx.exception), 'Bapp pay error[sign error]')

    @patch('bapp_pay.bapp_client.requests.post')
    def test_http_status_not_200(self, mock_post):
        mock_post.return_value = _response(status_code=502)
        with self.assertRaises(TransportError) as ctx:
            _client().create_order('1', 'body', 500)
        self.assertEqual(ctx.exception.status_code, 502)

    @patch('bapp_pay.bapp_client.requests.post')
    def test_connection_error(self, mock_post):
        mock_post.side_effect = requests.ConnectionError('connection refused')
        with self.assertRaises(TransportError):
            _client().create_order('1', 'body', 500)
        mock_post.assert_called_once()

    @patch('bapp_pay.bapp_client.requests.post')
    def test_not_json(self, mock_post):
        mock_post.return_value = _response(json_error=True)
        with self.assertRaises(ProtocolError):
            _client().create_order('1', 'body', 500)

    @patch('bapp_pay.bapp_client.requests.post')
    def test_bad_shape(self, mock_post):
        for payload in ([1, 2], {'msg': 'no code'}, {'code': 200, 'msg': '', 'data': None},
                        {'code': 200, 'msg': '', 'data': {'qr_code': 1}}):
            mock_post.return_value = _response(payload=payload)
            with self.assertRaises(ProtocolError):
                _client().create_order('1', 'body', 500)

    @patch('bapp_pay.bapp_client.requests.post')
    def test_bad_amount_type_not_sent(self, mock_post):
        with self.assertRaises(SchemaError):
            _client().create_order('1', 'body', None)
        mock_post.assert_not_called()


class TestQueryOrder(TestCase):

    @patch('bapp_pay.bapp_client.requests.get')
    def test_request_params_and_detail(self, mock_get):
        """Время в секундах, sign последним в query string."""
        mock_get.return_value = _response(payload={'code': 200, 'msg': 'ok', 'data': ORDER_DETAIL})
        detail = _client(base_url='https://bapi.test/').query_order('1')

        self.assertIsInstance(detail, OrderDetail)
        self.assertEqual(detail.order_state, ORDER_STATE_PAID)
        self.assertTrue(detail.is_paid)
        self.assertEqual(detail.create_time, 1560849482796)
        args, kwargs = mock_get.call_args
        self.assertEqual(args[0], 'https://bapi.test/api/v2/order')
        params = kwargs['params']
        self.assertEqual(list(params), ['order_id', 'time', 'app_key', 'sign'])
        self.assertEqual(params['time'], '1560849482')
        self.assertEqual(params['sign'], sign_params(
            {'order_id': '1', 'time': '1560849482', 'app_key': APP_KEY}, APP_SECRET,
        ))

    @patch('bapp_pay.bapp_client.requests.get')
    def test_missing_fields_default(self, mock_get):
        mock_get.return_value = _response(payload={'code': 200, 'msg': 'ok', 'data': {'order_id': '7', 'new': 1}})
        detail = _client().query_order('7')
        self.assertEqual(detail, OrderDetail(order_id='7'))
        self.assertFalse(detail.is_paid)

    @patch('bapp_pay.bapp_client.requests.get')
    def test_gateway_error(self, mock_get):
        mock_get.return_value = _response(payload={'code': 404, 'msg': 'order not found', 'data': None})
        with self.assertRaises(ProtocolError) as ctx:
            _client().query_order('nope')
        self.assertEqual(ctx.exception.message, 'order not found')

    @patch('bapp_pay.bapp_client.requests.get')
    def test_timeout(self, mock_get):
        mock_get.side_effect = requests.Timeout('read timeout')
        with self.assertRaises(TransportError):
            _client(timeout=1).query_order('1')
        self.assertEqual(mock_get.call_args.kwargs['timeout'], 1)


class TestVerifyOrderRequest(TestCase):

    def test_record(self):
        request = OrderRequest(order_id='1', order_state=1, amount=99, time=1573197754343, app_key=APP_KEY)
        request.sign = sign_params(request.__dict__, APP_SECRET)
        client = _client()
        self.assertTrue(client.verify_order_request(request))
        request.amount = 100
        self.assertFalse(client.verify_order_request(request))

    def test_mapping(self):
        payload = {'order_id': '1', 'amount': 99, 'extra': ''}
        payload['sign'] = sign_params(payload, APP_SECRET)
        self.assertTrue(_client().verify_order_request(payload))
        self.assertFalse(BappClient(APP_KEY, 'other', RETURN_URL, NOTIFY_URL).verify_order_request(payload))

    def test_schema_error(self):
        with self.assertRaises(SchemaError):
            _client().verify_order_request({'order_id': '1', 'amount': [99], 'sign': ''})


class TestSettingsFallback(TestCase):

    @patch('bapp_pay.bapp_client.settings')
    def test_credentials_from_settings(self, mock_settings):
        mock_settings.BAPP_APP_KEY = 'env_key'
        mock_settings.BAPP_APP_SECRET = 'env_secret'
        mock_settings.BAPP_RETURN_URL = 'https://return'
        mock_settings.BAPP_NOTIFY_URL = 'https://notify'
        mock_settings.BAPP_HOST = 'https://bapi.example/'
        mock_settings.BAPP_TIMEOUT = 3.0
        client = BappClient()
        self.assertEqual(client.app_key, 'env_key')
        self.assertEqual(client.app_secret, 'env_secret')
        self.assertEqual(client.return_url, 'https://return')
        self.assertEqual(client.notify_url, 'https://notify')
        self.assertEqual(client.base_url, 'https://bapi.example')
        self.assertEqual(client.timeout, 3.0)

    @patch('bapp_pay.bapp_client.settings')
    def test_arguments_override_settings(self, mock_settings):
        mock_settings.BAPP_HOST = 'https://bapi.app'
        mock_settings.BAPP_TIMEOUT = 10.0
        client = BappClient('k', 's', '', '')
        self.assertEqual((client.app_key, client.app_secret, client.return_url), ('k', 's', ''))
