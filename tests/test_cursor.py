import pytest

from qwebservice.cursor import XmlCursor, local_name
from qwebservice.errors import DocumentError

DOCUMENT = """<?xml version="1.0"?>
<root xmlns:a="urn:a" a:id="1">
  <first name="one"><inner><leaf/></inner></first>
  <second name="two" type="s:int"/>
  <third><x/><y/></third>
</root>
"""


@pytest.fixture
def cursor(tmp_path):
    path = tmp_path / "doc.xml"
    path.write_text(DOCUMENT, encoding="utf-8")
    with XmlCursor(str(path)) as c:
        yield c


def test_local_name():
    assert local_name("{http://schemas.xmlsoap.org/wsdl/}definitions") == "definitions"
    assert local_name("element") == "element"


def test_root_token(cursor):
    root = cursor.read_next()
    assert root.is_start
    assert root.name == "root"
    assert root.depth == 1
    # 属性名去掉命名空间，xmlns 声明不计入
    assert root.attributes == {"id": "1"}
    assert root.attribute_count == 1


def test_children_skips_unread_subtrees(cursor):
    root = cursor.read_next()
    names = [token.name for token in cursor.children(root)]
    assert names == ["first", "second", "third"]
    assert cursor.read_next() is None


def test_children_attributes(cursor):
    root = cursor.read_next()
    tokens = list(cursor.children(root))
    assert tokens[1].attributes == {"name": "two", "type": "s:int"}
    assert tokens[1].attribute_count == 2
    assert all(token.depth == 2 for token in tokens)


def test_descendants_stop_at_parent_end(cursor):
    root = cursor.read_next()
    children = cursor.children(root)
    first = next(children)
    assert [t.name for t in cursor.descendants(first)] == ["inner", "leaf"]
    assert [t.name for t in children] == ["second", "third"]


def test_malformed_document(tmp_path):
    path = tmp_path / "broken.xml"
    path.write_text("<root><a></root>", encoding="utf-8")
    with XmlCursor(str(path)) as c:
        with pytest.raises(DocumentError, match="malformed"):
            list(c)


def test_missing_file(tmp_path):
    with pytest.raises(DocumentError, match="cannot read WSDL file"):
        XmlCursor(str(tmp_path / "missing.wsdl"))
