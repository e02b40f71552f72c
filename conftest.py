import os

# Настройка окружения для pytest до импорта bapp_pay.settings:
# учетные данные только из тестов, не из локального .env
for key in ('BAPP_HOST', 'BAPP_APP_KEY', 'BAPP_APP_SECRET', 'BAPP_RETURN_URL', 'BAPP_NOTIFY_URL', 'BAPP_TIMEOUT', 'LOG_FILE'):
    os.environ[key] = ''
os.environ['DEBUG'] = 'False'
