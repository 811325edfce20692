class CarWashError(Exception):
    """Базовая ошибка бизнес-логики, превращается в ответ {"error": message}"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CarWashError):
    status_code = 400


class NotFound(CarWashError):
    status_code = 404


class ConflictError(CarWashError):
    status_code = 409


class StorageError(CarWashError):
    """Не удалось сохранить данные. Клиенту отдаётся общий текст ошибки."""

    status_code = 500
    public_message = "Ошибка сервера"
