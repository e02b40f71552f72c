class BappPayError(Exception):
    """Базовая ошибка работы с BApp."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def __str__(self):
        return f'Bapp pay error[{self.message}]'


class TransportError(BappPayError):
    """Сетевая ошибка или HTTP статус != 200."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ProtocolError(BappPayError):
    """Ответ не разбирается в {code, msg, data} или code != 200."""

    def __init__(self, message: str, code: int | None = None):
        self.code = code
        super().__init__(message)


class SchemaError(BappPayError):
    """Значение поля нельзя привести к строке для подписи."""

    def __init__(self, field: str, value):
        self.field = field
        self.value = value
        super().__init__(f'Поле {field}: тип {type(value).__name__} не поддерживается для подписи')
