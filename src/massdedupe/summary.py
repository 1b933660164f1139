"""生存ファイルのディレクトリ別集計"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from .report import cleanup_path


@dataclass
class DirNode:
    name: str
    direct_file_count: int = 0
    subtrees: dict[str, "DirNode"] = field(default_factory=dict)

    def total_count(self) -> int:
        """配下すべてのファイル数"""
        return self.direct_file_count + sum(child.total_count() for child in self.subtrees.values())

    def child(self, name: str) -> "DirNode":
        if name not in self.subtrees:
            self.subtrees[name] = DirNode(name)
        return self.subtrees[name]


def build_dir_tree(paths: Iterable[str]) -> DirNode:
    """パスの一覧からディレクトリツリーを作る（ファイル名部分は数だけ数える）"""
    root = DirNode("base")
    for path in paths:
        node = root
        for part in cleanup_path(path).split("/")[:-1]:
            node = node.child(part)
        node.direct_file_count += 1
    return root


def format_dir_tree(node: DirNode, indent: str = "") -> list[str]:
    """"-> 名前: 件数" 形式の行を深さ優先で返す（ルート自身は含めない）"""
    lines = []
    for child in node.subtrees.values():
        lines.append(f"{indent}-> {child.name}: {child.total_count()}")
        lines.extend(format_dir_tree(child, indent + "  "))
    return lines
