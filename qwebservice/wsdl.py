# -*- coding: utf-8 -*-
# qwebservice/wsdl.py
"""
WSDL 读取模块
从本地或远程 WSDL 文件中读取命名空间、服务名、服务地址以及方法定义。
方法取自 types/schema 中的元素，并按名字把请求元素和响应元素配对；
message / portType / binding 不参与建模。
"""

from typing import Callable, Dict, List, Optional, Tuple
from .base import Transport
from .cursor import Token, XmlCursor
from .errors import DocumentError, TransportError
from .method import WebMethod
from .model import Field, Method, ServiceModel
from .pairing import PairingStrategy, TruncationPairing
from .util import is_local_file, is_url, print_error, print_info, print_warn
from .wsdl_types import map_type

# 远程 WSDL 下载到的临时文件（固定文件名，每次下载覆盖）
TEMP_WSDL_FILE = "tempWsdl.asmx~"


class WsdlReader:
    """
    WSDL 读取器

    用法:
        reader = WsdlReader("band_ws.asmx")
        if not reader.is_error_state():
            methods = reader.get_methods()

    出错后读取器进入错误状态，错误信息累加保存；之后的 parse() 直接拒绝，
    直到调用 reset_wsdl() 清空所有状态重新解析。
    """

    def __init__(self, wsdl_file: Optional[str] = None, transport: Optional[Transport] = None,
                 pairing: Optional[PairingStrategy] = None, show_progress: bool = False):
        self.transport = transport or Transport()
        self.pairing = pairing or TruncationPairing()
        self.show_progress = show_progress

        # 通知回调
        self.on_error: List[Callable[[str], None]] = []
        self.on_file_changed: List[Callable[[], None]] = []

        self._wsdl_file = wsdl_file or ""
        self._clear()

        if wsdl_file:
            self.parse()

    def _clear(self) -> None:
        self._reset_document()
        self._error_state = False
        self._error_message = ""

    def _reset_document(self) -> None:
        """清空上一次解析得到的全部数据，错误状态除外"""
        self._local_path = ""
        self._source_url = ""
        self._target_namespace = ""
        self._web_service_name = ""
        self._address = ""
        # 解析过程中的工作数据：按文档顺序的元素名，以及对应的参数列表
        self._elements: List[str] = []
        self._element_fields: List[Tuple[Field, ...]] = []
        self._model: Optional[ServiceModel] = None

    # ------------------------------------------------------------------
    # 文件设置

    def get_wsdl_file(self) -> str:
        return self._wsdl_file

    def set_wsdl_file(self, wsdl_file: str) -> bool:
        return self.reset_wsdl(wsdl_file)

    def reset_wsdl(self, new_wsdl: str) -> bool:
        """清空全部状态并重新解析；之前取得的 Method 全部失效"""
        self._wsdl_file = new_wsdl
        self._clear()

        result = self.parse()
        for callback in self.on_file_changed:
            callback()
        return result

    # ------------------------------------------------------------------
    # 查询

    @property
    def model(self) -> Optional[ServiceModel]:
        return self._model

    def get_methods(self) -> Dict[str, Method]:
        return self._model.methods if self._model else {}

    def get_method_names(self) -> List[str]:
        return self._model.method_names() if self._model else []

    def get_web_service_name(self) -> str:
        return self._web_service_name

    def get_host(self) -> str:
        """服务地址；WSDL 中没有地址时返回 WSDL 的 URL 或文件路径"""
        return self._address or self._source_url or self._wsdl_file

    def get_target_namespace(self) -> str:
        return self._target_namespace

    def get_error_info(self) -> str:
        return self._error_message

    def is_error_state(self) -> bool:
        return self._error_state

    def web_method(self, name: str, **kwargs):
        """根据方法名创建可调用的 WebMethod，方法不存在时返回 None"""
        method = self._model.get_method(name) if self._model else None
        if method is None:
            return None
        kwargs.setdefault("transport", self.transport)
        return WebMethod.from_method(method, **kwargs)

    # ------------------------------------------------------------------
    # 解析

    def _enter_error_state(self, message: str) -> bool:
        self._error_state = True
        self._error_message += message + " "
        print_error(message)
        for callback in self.on_error:
            callback(message)
        return False

    def parse(self) -> bool:
        """解析 WSDL 文件，成功后 self.model 为新的 ServiceModel"""
        if self._error_state:
            return self._enter_error_state("WSDL reader is in error state and cannot parse the file.")

        # 每次解析都从文档重新构建模型
        self._reset_document()
        try:
            self._prepare_file()
            with XmlCursor(self._local_path) as cursor:
                self._read_document(cursor)
        except DocumentError as e:
            return self._enter_error_state(str(e))

        self._model = self._prepare_model()
        print_info(f"WSDL 解析完成: {self._web_service_name or self._wsdl_file}, {len(self._model)} 个方法")
        return True

    def _prepare_file(self) -> None:
        """本地文件直接读取；URL 先完整下载到临时文件"""
        if is_local_file(self._wsdl_file):
            self._local_path = self._wsdl_file
            return

        if not is_url(self._wsdl_file):
            raise DocumentError(f"Error: cannot read WSDL file: {self._wsdl_file}. Reason: file does not exist")

        self._source_url = self._wsdl_file
        try:
            self.transport.download(self._wsdl_file, TEMP_WSDL_FILE, self.show_progress)
        except TransportError as e:
            raise DocumentError(f"Error: cannot download WSDL file from remote location. Reason: {e}")
        except OSError as e:
            raise DocumentError(f"Error: cannot write WSDL file from remote location. Reason: {e}")
        self._local_path = TEMP_WSDL_FILE

    def _read_document(self, cursor: XmlCursor) -> None:
        root = cursor.read_next()
        if root is None or root.name != "definitions":
            raise DocumentError("Error: file does not have WSDL definitions inside!")

        self._target_namespace = root.attributes.get("targetNamespace", "")

        for token in cursor.children(root):
            if token.name == "types":
                self._read_types(cursor, token)
            elif token.name == "service":
                self._read_service(cursor, token)
            # message / portType / binding / documentation 以及其它标签由 children() 跳过

    def _read_types(self, cursor: XmlCursor, types: Token) -> None:
        first = True
        for token in cursor.children(types):
            if token.name == "schema":
                self._read_schema(cursor, token)
            elif first:
                raise DocumentError("Error: file does not have WSDL schema tag inside!")
            first = False

        if first:
            raise DocumentError("Error: file does not have WSDL schema tag inside!")

    def _read_schema(self, cursor: XmlCursor, schema: Token) -> None:
        for token in cursor.children(schema):
            # 只有一个 name 属性的顶层 element 视为请求/响应元素
            if (token.name == "element" and token.attribute_count == 1
                    and "name" in token.attributes):
                self._elements.append(token.attributes["name"])
                self._element_fields.append(self._read_schema_element(cursor, token))

    def _read_schema_element(self, cursor: XmlCursor, element: Token) -> Tuple[Field, ...]:
        """把 complexType/sequence 下的所有 element 展平成 (名字, 类型) 列表"""
        fields = []
        for token in cursor.descendants(element):
            if token.name != "element":
                continue
            # minOccurs / maxOccurs 不考虑
            name = token.attributes.get("name", "")
            element_type = token.attributes.get("type", "")
            if not name or not element_type:
                continue
            fields.append(Field(name, map_type(element_type)))
        return tuple(fields)

    def _read_service(self, cursor: XmlCursor, service: Token) -> None:
        if not self._web_service_name and "name" in service.attributes:
            self._web_service_name = service.attributes["name"]

        for token in cursor.descendants(service):
            if token.name == "address" and "location" in token.attributes and not self._address:
                self._address = token.attributes["location"]

    def _prepare_model(self) -> ServiceModel:
        """把配对成功的元素组装成 Method"""
        endpoint = self.get_host()
        methods: Dict[str, Method] = {}

        for pair in self.pairing.pair(self._elements):
            if pair.name in methods:
                print_warn(f"方法名重复，后者覆盖前者: {pair.name}")
            methods[pair.name] = Method(
                name=pair.name,
                target_namespace=self._target_namespace,
                endpoint=endpoint,
                parameters=self._element_fields[pair.request_index],
                return_fields=self._element_fields[pair.response_index]
            )

        return ServiceModel(
            namespace=self._target_namespace,
            endpoint=endpoint,
            name=self._web_service_name,
            source=self._wsdl_file,
            methods=methods
        )
