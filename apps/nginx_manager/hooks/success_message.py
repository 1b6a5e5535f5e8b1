# Nginx Manager Deploy v1.0
from apps.nginx_manager.settings import is_localhost_only


def get_success_message(record: dict, config_file: str = 'config.env') -> str:
    '''Get success message after deployment'''
    http_port = record.get('EXTERNAL_HTTP_PORT')
    https_port = record.get('EXTERNAL_HTTPS_PORT')
    data_dir = record.get('DATA_BASE_DIR')

    if is_localhost_only(record):
        access = f"""🔒 Local access only (127.0.0.1 / localhost):
   Web UI:   http://127.0.0.1:{http_port}  or  http://localhost:{http_port}
   HTTPS UI: https://127.0.0.1:{https_port}  or  https://localhost:{https_port}

   ⚠️  Ports are bound to the loopback address; they are not reachable from the network."""
    else:
        access = f"""🌐 Access:
   Web UI:   http://localhost:{http_port}
   HTTPS UI: https://localhost:{https_port}
   Public:   http://<server-ip>:{http_port}"""

    message = f"""{access}

📊 Management commands:
   Status:  docker compose --env-file {config_file} ps
   Logs:    docker compose --env-file {config_file} logs -f
   Stop:    docker compose --env-file {config_file} down
   Restart: docker compose --env-file {config_file} restart

📁 Data directory:
   {data_dir}/

⚙️  Configuration:
   Edit {config_file} to change ports and settings"""

    if not is_localhost_only(record):
        message += "\n   Set LOCALHOST_ONLY=true to restrict access to this machine"

    return message
