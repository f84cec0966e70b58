# -*- coding: utf-8 -*-
# qwebservice/base.py

import requests
import time
import urllib3
from typing import Dict, Any, Optional
from tqdm import tqdm
from .errors import TransportError

# 默认不校验证书，忽略 HTTPS 证书警告
urllib3.disable_warnings()

DEFAULT_USER_AGENT = "qwebservice/1.0"
DEFAULT_TIMEOUT = 30


class Transport:
    """HTTP 传输层，WSDL 下载和方法调用共用"""

    def __init__(self, proxy: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT,
                 extra_headers: Optional[Dict[str, str]] = None, verify: bool = False,
                 user_agent: str = DEFAULT_USER_AGENT):
        self.proxy = proxy
        self.timeout = timeout
        self.extra_headers = extra_headers or {}
        self.verify = verify
        self.user_agent = user_agent

    @property
    def proxies(self) -> Optional[Dict[str, str]]:
        if not self.proxy:
            return None
        return {
            'http': self.proxy,
            'https': self.proxy
        }

    def send_request(self, method: str, url: str, headers: Dict[str, str],
                     params: Dict[str, Any], body: Optional[str]) -> requests.Response:
        """发送HTTP请求，网络错误转换为 TransportError 抛出"""
        request_headers = {'User-Agent': self.user_agent}
        request_headers.update(headers)
        request_headers.update(self.extra_headers)

        start_time = time.time()
        try:
            response = requests.request(
                method=method,
                url=url,
                headers=request_headers,
                params=params or None,
                data=body.encode('utf-8') if isinstance(body, str) else body,
                proxies=self.proxies,
                timeout=self.timeout,
                verify=self.verify
            )
        except requests.exceptions.Timeout as e:
            raise TransportError(f"timeout: {e}") from e
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e)) from e
        response._response_time = time.time() - start_time

        return response

    def download(self, url: str, path: str, show_progress: bool = False) -> int:
        """把远程文档完整下载到本地文件，返回写入的字节数"""
        try:
            response = requests.get(
                url,
                headers={'User-Agent': self.user_agent, **self.extra_headers},
                proxies=self.proxies,
                timeout=self.timeout,
                verify=self.verify,
                stream=True
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e)) from e

        try:
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            response.close()
            raise TransportError(str(e)) from e

        total = int(response.headers.get('content-length', 0)) or None
        progress = tqdm(total=total, unit='B', unit_scale=True, desc="Downloading WSDL") if show_progress else None
        written = 0
        try:
            with open(path, 'wb') as f:
                for chunk in response.iter_content(chunk_size=8192):
                    if not chunk:
                        continue
                    f.write(chunk)
                    written += len(chunk)
                    if progress:
                        progress.update(len(chunk))
        except requests.exceptions.RequestException as e:
            raise TransportError(str(e)) from e
        finally:
            if progress:
                progress.close()
            response.close()

        return written


def simplify_error_message(error_msg: str) -> str:
    """简化错误信息显示"""
    if not error_msg:
        return "Unknown error"

    # 处理常见的连接错误
    if "Connection aborted" in error_msg:
        return "Connection aborted"
    elif "Connection reset by peer" in error_msg:
        return "Connection reset"
    elif "timeout" in error_msg.lower() or "timed out" in error_msg.lower():
        return "timeout"
    elif "Connection refused" in error_msg:
        return "Connection refused"
    elif "Name or service not known" in error_msg or "getaddrinfo failed" in error_msg:
        return "DNS resolution failed"
    elif "No route to host" in error_msg:
        return "No route to host"
    elif "Network is unreachable" in error_msg:
        return "Network unreachable"

    # 如果错误信息太长，截取前50个字符
    if len(error_msg) > 50:
        return error_msg[:47] + "..."

    return error_msg
