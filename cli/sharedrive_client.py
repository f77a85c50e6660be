"""HTTP client for communicating with the ShareDrive server."""

import os
import time
import uuid
from pathlib import Path
from typing import Optional

import httpx

from common.logging_config import get_logger
from cli.config import Config
from cli.utils import format_file_record, format_file_size

logger = get_logger(__name__)


class ShareDriveClient:
    """HTTP client for the ShareDrive API with retry logic and error handling."""

    def __init__(self, config: Config, transport: Optional[httpx.BaseTransport] = None):
        """
        Initialize the client.

        Args:
            config: Configuration instance
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.config = config
        self.session = httpx.Client(
            base_url=config.get_base_url(),
            timeout=config.get_timeout(),
            transport=transport,
        )
        self.request_id = None
        logger.info(f"Initialized ShareDriveClient [base_url={config.get_base_url()}]")

    def _calculate_upload_timeout(self, file_size: int) -> float:
        """
        Calculate timeout for upload based on file size.

        Returns:
            Timeout in seconds (30s base + 0.1s per MB)
        """
        size_mb = file_size / (1024 * 1024)
        return 30.0 + size_mb * 0.1

    def _resolve_download_path(self, output_path: Optional[str], file_id: str) -> Path:
        if output_path:
            output_file = Path(output_path)
            if output_file.is_dir():
                output_file = output_file / file_id
        else:
            output_file = self.config.get_downloads_dir() / file_id

        output_file.parent.mkdir(parents=True, exist_ok=True)
        return output_file

    def _request_with_retry(
        self,
        method: str,
        endpoint: str,
        max_retries: Optional[int] = None,
        **kwargs
    ) -> httpx.Response:
        """
        Make HTTP request with retry logic on 5xx errors and network failures.

        Args:
            method: HTTP method (GET, POST, DELETE, etc.)
            endpoint: API endpoint path
            max_retries: Max retry attempts (uses config default if None)
            **kwargs: Additional arguments to pass to httpx request

        Returns:
            HTTP response object

        Raises:
            ConnectionError: If max retries exceeded or connection fails
        """
        retry_config = self.config.get_retry_config()
        max_retries = max_retries if max_retries is not None else retry_config['max_retries']
        backoff = retry_config['retry_backoff_multiplier']

        last_exception = None

        self.request_id = str(uuid.uuid4())
        kwargs.setdefault('headers', {})
        kwargs['headers']['X-Request-ID'] = self.request_id

        logger.debug(f"Making request: {method} {endpoint} [request_id={self.request_id}]")

        for attempt in range(max_retries + 1):
            try:
                response = self.session.request(method, endpoint, **kwargs)

                logger.debug(
                    f"Response received: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                )

                if 400 <= response.status_code < 500:
                    logger.warning(
                        f"Client error: {method} {endpoint} status={response.status_code} [request_id={self.request_id}]"
                    )
                    return response

                if response.status_code >= 500 and attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Server error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} status={response.status_code}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue

                return response

            except (httpx.ConnectError, httpx.TimeoutException) as e:
                last_exception = e
                if attempt < max_retries:
                    delay = backoff ** attempt
                    logger.warning(
                        f"Network error (attempt {attempt + 1}/{max_retries + 1}): "
                        f"{method} {endpoint} error={type(e).__name__}, retrying in {delay}s [request_id={self.request_id}]"
                    )
                    time.sleep(delay)
                    continue
                logger.error(
                    f"Network error (max retries exceeded): {method} {endpoint} error={e} [request_id={self.request_id}]"
                )

        if isinstance(last_exception, httpx.TimeoutException):
            raise ConnectionError("Request timed out. Server may be overloaded.")
        raise ConnectionError("Cannot connect to ShareDrive server. Is it running?")

    def _format_error(self, response: httpx.Response) -> str:
        """
        Map HTTP errors to user-friendly messages.
        """
        try:
            error_data = response.json()
            detail = error_data.get('detail', 'Unknown error')
            code = error_data.get('code', 'UNKNOWN')
        except ValueError:
            detail = response.text if response.text else 'Unknown error'
            code = 'UNKNOWN'

        error_messages = {
            'INVALID_API_KEY': 'Not authenticated. Please run: login <username> <password>',
            'USER_ALREADY_EXISTS': 'Username already taken. Try logging in or choose a different username.',
            'INVALID_CREDENTIALS': 'Invalid username or password.',
            'FILE_NOT_FOUND': 'File not found, or you do not have access to it.',
            'FORBIDDEN': 'Only the owner of this file can do that.',
            'INVALID_TARGET': 'Invalid target: {detail}',
            'FILE_CONFLICT': 'A file with this name already exists. Rename it and try again.',
            'INVALID_FILE_NAME': 'File name has no usable characters.',
            'STORAGE_FAILURE': 'Server storage is unavailable. Please try again later.',
        }

        if code in error_messages:
            return error_messages[code].format(detail=detail)

        status_messages = {
            400: 'Bad request',
            401: 'Not authenticated',
            403: 'Access forbidden',
            404: 'Not found',
            409: 'Conflict',
            413: 'File too large',
            500: 'Server error',
            503: 'Service unavailable',
        }

        message = status_messages.get(response.status_code, detail)
        return f"{message} (Code: {code})" if code != 'UNKNOWN' else message

    def _get_auth_header(self) -> dict:
        """
        Get Authorization header with API key.

        Raises:
            ValueError: If no API key is configured
        """
        api_key = self.config.get_api_key()
        if not api_key:
            raise ValueError("Not logged in. Please run: login <username> <password>")
        return {'Authorization': f'Bearer {api_key}'}

    def _call(self, method: str, endpoint: str, action: str, **kwargs):
        """
        Send an authenticated request.

        Returns:
            (response, None) on success or (None, message) when the call could not be made
        """
        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return None, f"Error: {e}"

        try:
            return self._request_with_retry(method, endpoint, headers=headers, **kwargs), None
        except ConnectionError as e:
            logger.error(f"Connection error during {action}: {e}")
            return None, f"Error: {e}"

    def register(self, username: str, password: str) -> str:
        """
        Register a new user account and store the issued API key.
        """
        logger.info(f"Attempting to register user: {username}")
        try:
            response = self._request_with_retry(
                'POST',
                '/auth/register',
                json={'username': username, 'password': password}
            )
        except ConnectionError as e:
            logger.error(f"Connection error during registration: {e}")
            return f"Error: {e}"

        if response.status_code == 201:
            data = response.json()
            self.config.set_api_key(data['api_key'])
            self.config.set_username(username)
            logger.info(f"Registration successful for user: {username} [user_id={data['user_id']}]")
            return f"Registration successful!\nUser ID: {data['user_id']}\nAPI key saved to config."

        logger.warning(f"Registration failed for user: {username} status={response.status_code}")
        return f"Registration failed: {self._format_error(response)}"

    def login(self, username: str, password: str) -> str:
        """
        Login and store the new API key.
        """
        logger.info(f"Attempting to login user: {username}")
        try:
            response = self._request_with_retry(
                'POST',
                '/auth/login',
                json={'username': username, 'password': password}
            )
        except ConnectionError as e:
            logger.error(f"Connection error during login: {e}")
            return f"Error: {e}"

        if response.status_code == 200:
            self.config.set_api_key(response.json()['api_key'])
            self.config.set_username(username)
            logger.info(f"Login successful for user: {username}")
            return "Login successful!\nAPI key updated in config."

        logger.warning(f"Login failed for user: {username} status={response.status_code}")
        return f"Login failed: {self._format_error(response)}"

    def logout(self) -> str:
        """
        Revoke the API key on the server, then drop it from the config.

        A key the server already rejects is dropped too.
        """
        response, error = self._call('POST', '/auth/logout', 'logout')
        if error:
            return error
        if response.status_code not in (200, 401):
            return f"Error: {self._format_error(response)}"

        username = self.config.get_username()
        self.config.clear_credentials()
        logger.info(f"Logged out user: {username}")
        return "Logged out. API key removed from config."

    def whoami(self) -> str:
        response, error = self._call('GET', '/auth/me', 'whoami')
        if error:
            return error
        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        data = response.json()
        return f"Logged in as {data['username']} (User ID: {data['user_id']})"

    def upload_files(self, file_paths: list[str]) -> str:
        """
        Upload local files. Each file keeps its base name as file id.

        Returns:
            One result line per file
        """
        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return f"Error: {e}"

        results = []
        for file_path in file_paths:
            if not os.path.isfile(file_path):
                results.append(f"Error: File not found: {file_path}")
                continue

            file_size = os.path.getsize(file_path)
            filename = os.path.basename(file_path)
            upload_timeout = self._calculate_upload_timeout(file_size)

            try:
                with open(file_path, 'rb') as f:
                    response = self.session.post(
                        '/files',
                        files={'file': (filename, f)},
                        headers={**headers, 'X-Request-ID': str(uuid.uuid4())},
                        timeout=upload_timeout,
                    )
            except httpx.ConnectError:
                results.append(f"Error uploading {file_path}: Cannot connect to ShareDrive server")
                continue
            except httpx.TimeoutException:
                results.append(
                    f"Error uploading {file_path}: Upload timed out "
                    f"(file size: {format_file_size(file_size)}, timeout: {upload_timeout:.1f}s)"
                )
                continue
            except OSError as e:
                results.append(f"Error reading {file_path}: {e}")
                continue

            if response.status_code == 201:
                result = response.json()
                results.append(
                    f"Uploaded: {result['file_id']} (Size: {format_file_size(result['size'])})"
                )
            else:
                results.append(f"Error uploading {file_path}: {self._format_error(response)}")

        return '\n'.join(results) if results else "No files uploaded."

    def list_files(self) -> str:
        """List files owned by or shared with the current user."""
        response, error = self._call('GET', '/files', 'list')
        if error:
            return error
        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        files = response.json()['files']
        if not files:
            return "No files found."

        output = [f"Found {len(files)} file(s):\n"]
        output.extend(format_file_record(file_meta) for file_meta in files)
        return '\n'.join(output)

    def file_info(self, file_id: str) -> str:
        response, error = self._call('GET', f'/files/{file_id}', 'info')
        if error:
            return error
        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"
        return format_file_record(response.json())

    def download(self, file_id: str, output_path: Optional[str] = None) -> str:
        """
        Download a file by id.

        Args:
            file_id: Id of the file to download
            output_path: Optional output path; defaults to <downloads_dir>/<file_id>

        Returns:
            Success message with download details
        """
        try:
            headers = self._get_auth_header()
        except ValueError as e:
            return f"Error: {e}"

        try:
            with self.session.stream('GET', f'/files/{file_id}/download', headers=headers) as response:
                if response.status_code != 200:
                    response.read()
                    return f"Error: {self._format_error(response)}"

                output_file = self._resolve_download_path(output_path, file_id)
                downloaded = 0
                with open(output_file, 'wb') as f:
                    for chunk in response.iter_bytes(chunk_size=8192):
                        f.write(chunk)
                        downloaded += len(chunk)

        except httpx.ConnectError:
            return "Error: Cannot connect to ShareDrive server. Is it running?"
        except httpx.TimeoutException:
            return "Error: Request timed out. Server may be overloaded."
        except OSError as e:
            return f"Error writing file: {e}"

        logger.info(f"Downloaded {file_id} to {output_file} ({downloaded} bytes)")
        return f"Downloaded: {file_id} ({format_file_size(downloaded)})\nSaved to: {output_file.absolute()}"

    def transfer(self, file_id: str, new_owner: str) -> str:
        response, error = self._call(
            'POST', f'/files/{file_id}/transfer', 'transfer', json={'new_owner': new_owner}
        )
        if error:
            return error
        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"
        return f"Transferred {file_id} to {response.json()['owner']}."

    def share(self, file_id: str, users: list[str]) -> str:
        response, error = self._call(
            'PUT', f'/files/{file_id}/shares', 'share', json={'users': users}
        )
        if error:
            return error
        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        shared = response.json()['shared_to']
        if not shared:
            return f"{file_id} is no longer shared with anyone."
        return f"{file_id} is shared with: {', '.join(shared)}"

    def revoke(self, file_id: str, users: list[str]) -> str:
        response, error = self._call(
            'DELETE', f'/files/{file_id}/shares', 'revoke', params={'users': ','.join(users)}
        )
        if error:
            return error
        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"

        shared = response.json()['shared_to']
        remaining = ', '.join(shared) if shared else '(nobody)'
        return f"Revoked access to {file_id}. Still shared with: {remaining}"

    def delete(self, file_id: str) -> str:
        response, error = self._call('DELETE', f'/files/{file_id}', 'delete')
        if error:
            return error
        if response.status_code != 200:
            return f"Error: {self._format_error(response)}"
        return f"Deleted {file_id}."

    def close(self) -> None:
        """Close the HTTP session."""
        self.session.close()
