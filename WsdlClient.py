# WsdlClient.py

import argparse
import csv
import queue
import threading
import time
from datetime import datetime
from colorama import init, Fore, Style
from tqdm import tqdm
from qwebservice import Transport, WsdlReader
from qwebservice.base import simplify_error_message
from qwebservice.serializers import HttpVerb, WireProtocol
from qwebservice.util import get_status_color, parse_headers_arg, parse_params_arg, print_error, print_info, print_warn
from qwebservice.wsdl_types import coerce_value

# 初始化 colorama 自动重置颜色样式
init(autoreset=True)

BANNER = r"""
────────────────────────────────────────────────────────────
   ___  _    _  ____  ____  _
  / _ \| |  | |/ ___||  _ \| |
 | | | | |/\| |\___ \| | | | |
 | |_| \  /\  / ___) | |_| | |___
  \__\_\\/  \/ |____/|____/|_____|   -- WSDL Web Service Client v1.0
────────────────────────────────────────────────────────────
"""


def kind_name(kind):
    return kind.value if hasattr(kind, "value") else str(kind)


# WSDL 方法调用客户端
class WsdlClient:
    def __init__(self, reader, protocol="soap12", http_method="POST", rest=False,
                 threads=1, delay=0, output_format="csv"):
        self.reader = reader
        self.protocol = protocol
        self.http_method = http_method
        self.rest = rest
        self.threads = threads
        self.delay = delay
        self.output_format = output_format
        self.queue = queue.Queue()
        self.results = []
        self.lock = threading.Lock()
        self.progress = None

    # 列出所有方法及参数类型
    def list_methods(self):
        methods = self.reader.get_methods()
        print(f"\n{Fore.CYAN}=== {self.reader.get_web_service_name() or 'Web Service'} ==={Style.RESET_ALL}")
        print(f"Namespace: {self.reader.get_target_namespace()}")
        print(f"Host:      {self.reader.get_host()}\n")
        for name in self.reader.get_method_names():
            method = methods[name]
            params = ", ".join(f"{f.name}: {kind_name(f.kind)}" for f in method.parameters)
            returns = ", ".join(f"{f.name}: {kind_name(f.kind)}" for f in method.return_fields)
            print(f"  {Fore.GREEN}{name}{Style.RESET_ALL}({params}) -> ({returns})")
        print()

    # 根据方法定义把命令行参数转换为对应类型
    def build_parameters(self, method, raw_params):
        params = method.parameter_defaults()
        kinds = {f.name: f.kind for f in method.parameters}
        for name, text in raw_params.items():
            if name in kinds:
                try:
                    params[name] = coerce_value(kinds[name], text)
                except ValueError as e:
                    print_warn(f"参数 {name} 转换失败，按字符串发送: {e}")
                    params[name] = text
            else:
                print_warn(f"方法 {method.name} 没有参数 {name}，按字符串发送")
                params[name] = text
        return params

    def create_web_method(self, name):
        return self.reader.web_method(name, protocol=self.protocol,
                                      http_method=self.http_method, rest=self.rest)

    # 同步调用单个方法并打印回复
    def invoke_one(self, name, raw_params, timeout=None):
        method = self.reader.get_methods().get(name)
        if method is None:
            print_error(f"WSDL 中没有方法: {name}")
            return False

        web_method = self.create_web_method(name)
        if not web_method.invoke(self.build_parameters(method, raw_params)):
            return False
        if not web_method.wait_for_reply(timeout):
            print_error(f"{name} 等待回复超时")
            return False

        invocation = web_method.invocation
        status = str(invocation.status_code) if invocation.status_code else "ERROR"
        print(f"{get_status_color(status)}[{web_method.http_method_string():<6}] {web_method.host} -> {status}{Style.RESET_ALL}")
        if invocation.is_error_state():
            print_error(invocation.error_info)
        print(invocation.reply.decode("utf-8", errors="replace"))
        return not invocation.is_error_state()

    # 调用全部方法（默认参数），多线程运行
    def invoke_all(self, raw_params):
        methods = self.reader.get_methods()
        for name in self.reader.get_method_names():
            self.queue.put(methods[name])

        self.progress = tqdm(total=self.queue.qsize(), desc="Invoking")
        threads = []
        for _ in range(self.threads):
            t = threading.Thread(target=self.worker, args=(raw_params,))
            t.daemon = True
            t.start()
            threads.append(t)
        self.queue.join()
        self.progress.close()

        self.show_summary()
        self.save_results()

    # 工作线程函数：取出方法，调用，记录回复
    def worker(self, raw_params):
        while True:
            try:
                method = self.queue.get(timeout=1)
            except queue.Empty:
                break
            try:
                web_method = self.create_web_method(method.name)
                if not web_method.invoke(self.build_parameters(method, raw_params)):
                    continue
                web_method.wait_for_reply()
                invocation = web_method.invocation

                status = str(invocation.status_code) if invocation.status_code else "ERROR"
                error = simplify_error_message(invocation.error_info) if invocation.is_error_state() else ""
                with self.lock:
                    self.results.append((
                        web_method.http_method_string(), method.name, web_method.host, status,
                        round(invocation.response_time, 3), len(invocation.reply), error,
                        invocation.reply[:200].decode("utf-8", errors="replace")
                    ))

                display_status = f"{status}: {error}" if error and status == "ERROR" else status
                tqdm.write(f"{get_status_color(status)}[{method.name:<30}] {web_method.host:<60} -> {display_status}{Style.RESET_ALL}")
                if self.delay > 0:
                    time.sleep(self.delay)
            finally:
                self.progress.update(1)
                self.queue.task_done()

    # 控制台展示调用结果总结
    def show_summary(self):
        print(f"\n{Fore.CYAN}=== Summary ==={Style.RESET_ALL}")
        for r in self.results:
            print(f"{get_status_color(r[3])}[{r[0]:<6}] {r[1]:<30} -> {r[3]:<5} {r[6]}{Style.RESET_ALL}")

    # 保存调用结果到 CSV 文件
    def save_results(self):
        if not self.results:
            print_warn("没有结果可保存")
            return

        filename = f"wsdl_client_{datetime.now().strftime('%Y%m%d_%H%M%S')}.{self.output_format}"
        with open(filename, "w", newline="", encoding="utf-8-sig") as f:
            writer = csv.writer(f)
            writer.writerow([
                "HTTP Method", "Method", "URL", "Status", "Response Time",
                "Length", "Error", "Response Snippet"
            ])
            for row in self.results:
                writer.writerow(row)
        print_info(f"调用结果已保存到: {filename}")


# 命令行参数解析及主程序入口
def main(argv=None):
    print(BANNER)
    parser = argparse.ArgumentParser(description="WSDL Web Service Client")
    parser.add_argument("-w", "--wsdl", help="WSDL 本地文件路径或 URL", required=True)
    parser.add_argument("-l", "--list", help="列出 WSDL 中的所有方法", action="store_true")
    parser.add_argument("-m", "--method", help="要调用的方法名")
    parser.add_argument("-a", "--all", help="使用默认参数调用全部方法", action="store_true")
    parser.add_argument("--param", action="append", help='方法参数，例如 --param="symbol=NOK"')
    parser.add_argument("--protocol", help="消息协议",
                        choices=[p.value for p in WireProtocol], default=WireProtocol.SOAP12.value)
    parser.add_argument("--rest", help="参数附加到 URL 查询串（REST）", action="store_true")
    parser.add_argument("-X", "--http-method", help="HTTP 方法",
                        choices=[v.value for v in HttpVerb], type=str.upper, default=HttpVerb.POST.value)
    parser.add_argument("-p", "--proxy", help="设置代理，例如 http://127.0.0.1:8080")
    parser.add_argument("-t", "--threads", help="线程数（--all）", type=int, default=1)
    parser.add_argument("-d", "--delay", help="请求间隔（秒）", type=float, default=0)
    parser.add_argument("--timeout", help="请求超时（秒）", type=float, default=30)
    parser.add_argument("-o", "--output", help="输出格式", choices=["csv"], default="csv")
    parser.add_argument("--header", action="append", help='自定义请求头，例如 --header="Authorization: Bearer xxx"')

    args = parser.parse_args(argv)

    transport = Transport(proxy=args.proxy, timeout=args.timeout,
                          extra_headers=parse_headers_arg(args.header))
    reader = WsdlReader(args.wsdl, transport=transport, show_progress=True)
    if reader.is_error_state():
        print_error(f"加载 WSDL 失败: {reader.get_error_info()}")
        return 1

    client = WsdlClient(
        reader,
        protocol=args.protocol,
        http_method=args.http_method,
        rest=args.rest,
        threads=args.threads,
        delay=args.delay,
        output_format=args.output
    )

    raw_params = parse_params_arg(args.param)
    if args.method:
        return 0 if client.invoke_one(args.method, raw_params) else 1
    if args.all:
        client.invoke_all(raw_params)
        return 0

    client.list_methods()
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
