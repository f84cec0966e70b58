# -*- coding: utf-8 -*-
# qwebservice/util.py

import os
from typing import Dict, List, Optional
from urllib.parse import urlparse
from colorama import Fore, Style
from tqdm import tqdm


def get_status_color(status):
    """获取状态码对应的颜色"""
    if status.startswith("2"):
        return Fore.GREEN  # 成功
    elif status == "401" or status == "403":
        return Fore.RESET   # 授权失败，正常拦截
    elif status.startswith("5"):
        return Fore.RED  # 服务端错误
    elif status in ["400", "422"]:
        return Fore.YELLOW  # 客户端参数问题
    elif status.startswith("3"):
        return Fore.BLUE  # 跳转状态
    elif status == "ERROR":  # 传输层错误
        return Fore.MAGENTA
    else:
        return Fore.RESET  # 其他


def print_info(message: str) -> None:
    # 使用tqdm.write确保不干扰进度条
    tqdm.write(f"{Fore.GREEN}[+]{Style.RESET_ALL} {message}")


def print_warn(message: str) -> None:
    tqdm.write(f"{Fore.YELLOW}[!]{Style.RESET_ALL} {message}")


def print_error(message: str) -> None:
    tqdm.write(f"{Fore.RED}[!] {message}{Style.RESET_ALL}")


def is_local_file(source: str) -> bool:
    return bool(source) and os.path.isfile(source)


def is_url(source: str) -> bool:
    """检查是否为有效的URL（需要 scheme 和 host）"""
    try:
        result = urlparse(source)
        return all([result.scheme, result.netloc])
    except ValueError:
        return False


def parse_headers_arg(headers_list: Optional[List[str]]) -> Dict[str, str]:
    """解析命令行参数中的请求头"""
    headers = {}
    if headers_list:
        for h in headers_list:
            if ":" in h:
                k, v = h.split(":", 1)
                headers[k.strip()] = v.strip()
    return headers


def parse_params_arg(params_list: Optional[List[str]]) -> Dict[str, str]:
    """解析命令行参数中的方法参数，格式 name=value"""
    params = {}
    if params_list:
        for p in params_list:
            if "=" in p:
                k, v = p.split("=", 1)
                params[k.strip()] = v
    return params
