"""
基于 HorizontalPodAutoscaler YAML 清单的策略来源
"""

from pathlib import Path
from typing import Any, List, Union

import yaml
from loguru import logger
from pydantic import ValidationError

from core.exceptions import PolicySourceException
from core.models import HorizontalPodAutoscaler
from core.ports import PolicySource

HPA_KIND = "HorizontalPodAutoscaler"


class ManifestPolicySource(PolicySource):
    """
    从单个 YAML 文件或 YAML 文件目录读取自动扩缩容策略

    每次调用都重新读取文件，修改在下一轮对账生效。
    其他 kind 的文档被忽略，非法的 HPA 文档记录日志后跳过。
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def list_policies(self) -> List[HorizontalPodAutoscaler]:
        policies = []
        for file_path in self._manifest_files():
            for document in self._load_documents(file_path):
                if not isinstance(document, dict) or document.get("kind") != HPA_KIND:
                    continue
                try:
                    policies.append(HorizontalPodAutoscaler.from_manifest(document))
                except ValidationError as e:
                    name = self._document_name(document)
                    logger.warning(f"Skipping invalid {HPA_KIND} {name} in {file_path}: {e}")
        return policies

    def _manifest_files(self) -> List[Path]:
        if self.path.is_dir():
            return sorted(
                p
                for p in self.path.iterdir()
                if p.suffix in (".yaml", ".yml") and p.is_file()
            )
        if self.path.is_file():
            return [self.path]
        raise PolicySourceException(str(self.path), "no such file or directory")

    @staticmethod
    def _load_documents(file_path: Path) -> List[Any]:
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                return [doc for doc in yaml.safe_load_all(f) if doc]
        except (OSError, yaml.YAMLError) as e:
            raise PolicySourceException(str(file_path), str(e)) from e

    @staticmethod
    def _document_name(document: dict) -> str:
        metadata = document.get("metadata")
        if isinstance(metadata, dict) and metadata.get("name"):
            return str(metadata["name"])
        return "<unnamed>"
