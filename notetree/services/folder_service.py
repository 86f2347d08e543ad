"""
文件夹层级服务

负责文件夹的创建、重命名/移动、删除以及树形结构的构建。
所有校验和写入都在同一个工作单元（事务）内完成，任何异常都会整体回滚。
"""
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from notetree.core.config import settings
from notetree.core.exceptions import (
    IntegrityViolationError,
    InvariantError,
    NotFoundError,
    ParentNotFoundError,
)
from notetree.core.types import UNSET
from notetree.models.folder import Folder
from notetree.schemas.folder import FolderDeleteResult, FolderTreeNode
from notetree.services.validators import require_text

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class FolderHierarchyManager:
    """
    文件夹层级管理

    Args:
        unit_of_work: 无参可调用对象，返回异步上下文管理器，
            进入后得到带有 folders / notes 两个存储的对象
        max_depth: 环检测时子树遍历的最大层数
        name_max_length: 文件夹名称最大长度
        strict_tree: 构建树时遇到父文件夹不存在的记录是否报错
    """

    def __init__(
        self,
        unit_of_work: Callable,
        max_depth: Optional[int] = None,
        name_max_length: Optional[int] = None,
        strict_tree: Optional[bool] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.unit_of_work = unit_of_work
        self.max_depth = max_depth if max_depth is not None else settings.FOLDER_MAX_DEPTH
        self.name_max_length = name_max_length or settings.FOLDER_NAME_MAX_LENGTH
        self.strict_tree = settings.STRICT_TREE_INTEGRITY if strict_tree is None else strict_tree
        self.clock = clock

    def _validate_name(self, name) -> str:
        return require_text(name, "文件夹名称", self.name_max_length)

    async def create_folder(self, name: str, parent_id: Optional[int] = None) -> Folder:
        """
        创建文件夹

        Args:
            name: 文件夹名称
            parent_id: 父文件夹ID，None表示根目录

        Raises:
            ValidationError: 名称为空或过长
            ParentNotFoundError: 父文件夹不存在
        """
        name = self._validate_name(name)

        async with self.unit_of_work() as stores:
            if parent_id is not None:
                parent = await stores.folders.get(parent_id, for_update=True)
                if parent is None:
                    raise ParentNotFoundError(parent_id)

            now = self.clock()
            folder = await stores.folders.insert(
                name=name,
                parent_id=parent_id,
                created_at=now,
                updated_at=now
            )

        logger.info("Created folder %s (%r) under %s", folder.id, folder.name, parent_id)
        return folder

    async def get_folder(self, folder_id: int) -> Folder:
        async with self.unit_of_work() as stores:
            folder = await stores.folders.get(folder_id)
        if folder is None:
            raise NotFoundError(folder_id)
        return folder

    async def update_folder(self, folder_id: int, name=UNSET, parent_id=UNSET) -> Folder:
        """
        重命名和/或移动文件夹

        只修改显式传入的字段；parent_id=None 表示移动到根目录。
        无论修改哪些字段，updated_at 都会刷新。

        Raises:
            ValidationError: 新名称为空或过长
            NotFoundError: 文件夹不存在
            ParentNotFoundError: 新父文件夹不存在
            InvariantError: 移动到自己或自己的子孙文件夹下
        """
        fields = {}
        if name is not UNSET:
            fields["name"] = self._validate_name(name)
        if parent_id is not UNSET:
            if parent_id is not None and parent_id == folder_id:
                logger.warning("Rejected moving folder %s under itself", folder_id)
                raise InvariantError(InvariantError.SELF_PARENT)
            fields["parent_id"] = parent_id

        async with self.unit_of_work() as stores:
            folder = await stores.folders.get(folder_id, for_update=True)
            if folder is None:
                raise NotFoundError(folder_id)

            if parent_id is not UNSET and parent_id is not None:
                parent = await stores.folders.get(parent_id, for_update=True)
                if parent is None:
                    raise ParentNotFoundError(parent_id)
                if await self._is_descendant(stores.folders, folder_id, parent_id):
                    logger.warning(
                        "Rejected moving folder %s under its descendant %s", folder_id, parent_id
                    )
                    raise InvariantError(InvariantError.DESCENDANT_AS_PARENT)

            fields["updated_at"] = self.clock()
            folder = await stores.folders.update(folder_id, fields)

        if "parent_id" in fields:
            logger.info("Moved folder %s under %s", folder_id, fields["parent_id"])
        return folder

    async def _is_descendant(self, folders, folder_id: int, candidate_id: int) -> bool:
        """
        广度优先遍历 folder_id 的子树，判断 candidate_id 是否在其中

        每个节点最多展开一次，即使存储中已经存在环也能结束。
        深度恰好为 max_depth 的子树可以完整遍历；只有第 max_depth 层
        的节点还有未访问的子节点时才拒绝，不做可能不安全的移动。
        """
        visited = {folder_id}
        frontier = [folder_id]
        depth = 0

        while frontier:
            next_frontier = []
            for node_id in frontier:
                for child in await folders.list_by_parent(node_id):
                    if child.id == candidate_id:
                        return True
                    if child.id not in visited:
                        visited.add(child.id)
                        next_frontier.append(child.id)
            depth += 1
            if next_frontier and depth > self.max_depth:
                raise InvariantError(InvariantError.DEPTH_EXCEEDED)
            frontier = next_frontier

        return False

    async def delete_folder(self, folder_id: int) -> FolderDeleteResult:
        """
        删除文件夹

        子文件夹和笔记不会被删除，而是挂到被删除文件夹原来的父文件夹下
        （根文件夹被删除时它们变成根级）。先迁移再删除，三步在同一事务内。

        Raises:
            NotFoundError: 文件夹不存在（包括已经删除过）
        """
        async with self.unit_of_work() as stores:
            folder = await stores.folders.get(folder_id, for_update=True)
            if folder is None:
                raise NotFoundError(folder_id)

            new_parent_id = folder.parent_id
            moved_folders = await stores.folders.reassign_parent(folder_id, new_parent_id)
            moved_notes = await stores.notes.reassign_folder(folder_id, new_parent_id)
            await stores.folders.delete(folder_id)

        logger.info(
            "Deleted folder %s, reattached %d folders and %d notes to %s",
            folder_id, moved_folders, moved_notes, new_parent_id
        )
        return FolderDeleteResult(
            success=True,
            reattached_folders=moved_folders,
            reattached_notes=moved_notes
        )

    async def get_folder_tree(self) -> List[FolderTreeNode]:
        """
        构建文件夹树结构

        同级文件夹按存储顺序（ID升序）排列，每个节点带有笔记数量。
        """
        async with self.unit_of_work() as stores:
            folders = await stores.folders.list()
            notes_count = await stores.notes.count_all_by_folder()

        nodes: Dict[int, FolderTreeNode] = {
            f.id: FolderTreeNode(
                id=f.id,
                name=f.name,
                parent_id=f.parent_id,
                created_at=f.created_at,
                updated_at=f.updated_at,
                notes_count=notes_count.get(f.id, 0),
                children=[]
            )
            for f in folders
        }

        roots: List[FolderTreeNode] = []
        orphans: List[FolderTreeNode] = []
        for f in folders:
            if f.parent_id is None:
                roots.append(nodes[f.id])
            elif f.parent_id in nodes:
                nodes[f.parent_id].children.append(nodes[f.id])
            elif self.strict_tree:
                raise IntegrityViolationError(
                    f"文件夹 {f.id} 的父文件夹 {f.parent_id} 不存在"
                )
            else:
                orphans.append(nodes[f.id])
                logger.warning(
                    "Folder %s references missing parent %s, excluded from tree",
                    f.id, f.parent_id
                )

        # 从根和孤儿出发都到不了的文件夹处在父引用环中或挂在环下
        cyclic = set(nodes) - self._reachable(roots + orphans)
        if cyclic:
            if self.strict_tree:
                raise IntegrityViolationError(
                    f"文件夹 {sorted(cyclic)} 的父引用形成环"
                )
            logger.warning(
                "Folders %s form a parent cycle, excluded from tree", sorted(cyclic)
            )

        return roots

    @staticmethod
    def _reachable(starts: List[FolderTreeNode]) -> set:
        seen = set()
        stack = list(starts)
        while stack:
            node = stack.pop()
            if node.id in seen:
                continue
            seen.add(node.id)
            stack.extend(node.children)
        return seen
