"""
Команда bapp-pay: создание и запрос заказа, проверка уведомления.
Учетные данные берутся из переменных окружения BAPP_* (или .env).
"""
import argparse
import dataclasses
import json
import sys

import structlog

from bapp_pay import settings
from bapp_pay.bapp_client import BappClient
from bapp_pay.exceptions import BappPayError
from bapp_pay.notify import process_notification

logger = structlog.get_logger('bapp')

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_BAD_SIGN = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='bapp-pay', description='Клиент платежного шлюза BApp')
    parser.add_argument('--host', help='Адрес шлюза (по умолчанию BAPP_HOST)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    create = subparsers.add_parser('create', help='Создать заказ')
    create.add_argument('order_id')
    create.add_argument('amount', type=int)
    create.add_argument('--body', default='', help='Описание товара')

    query = subparsers.add_parser('query', help='Запросить заказ')
    query.add_argument('order_id')

    verify = subparsers.add_parser('verify', help='Проверить подпись уведомления')
    verify.add_argument('file', nargs='?', help='JSON уведомления (по умолчанию stdin)')
    return parser


def _print_record(record, stdout) -> None:
    stdout.write(json.dumps(dataclasses.asdict(record), ensure_ascii=False, indent=2) + '\n')


def main(argv=None, stdout=None, stderr=None, stdin=None) -> int:
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr
    args = build_parser().parse_args(argv)
    settings.setup_logging()
    client = BappClient(base_url=args.host)
    try:
        if args.command == 'create':
            _print_record(client.create_order(args.order_id, args.body, args.amount), stdout)
        elif args.command == 'query':
            _print_record(client.query_order(args.order_id), stdout)
        elif args.command == 'verify':
            if args.file:
                try:
                    with open(args.file, 'rb') as file:
                        raw = file.read()
                except OSError as err:
                    logger.error('bapp-pay verify: файл не прочитан', file=args.file, error=str(err))
                    stderr.write(f'{err}\n')
                    return EXIT_ERROR
            else:
                raw = (stdin or sys.stdin.buffer).read()
            passed, order = process_notification(raw, client.app_secret)
            logger.info('bapp-pay verify', order_id=order.order_id, passed=passed)
            stdout.write('OK\n' if passed else 'FAIL\n')
            return EXIT_OK if passed else EXIT_BAD_SIGN
    except BappPayError as err:
        logger.error('bapp-pay: ошибка', command=args.command, error=str(err))
        stderr.write(f'{err}\n')
        return EXIT_ERROR
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
