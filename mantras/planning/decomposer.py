"""Decomposer - expands a free-text request into a chain of tasks.

Requests are classified by case-insensitive keyword matching against a
table of templates checked in order. Each template is a fixed list of
steps; the generated tasks form a linear chain where every step depends
on the one before it.
"""

from dataclasses import dataclass

from loguru import logger

from mantras.planning.models import Task, TaskDraft, TaskMetadata, TaskPriority
from mantras.planning.task_store import TaskStore


@dataclass(frozen=True)
class StepTemplate:
    """One step of a decomposition template."""

    title: str
    description: str
    priority: TaskPriority
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class DecompositionTemplate:
    """A named step list and the keywords that select it.

    A template without keywords matches every request and serves as
    the fallback.
    """

    name: str
    steps: tuple[StepTemplate, ...]
    keywords: tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        if not self.keywords:
            return True
        lowered = text.lower()
        return any(keyword.lower() in lowered for keyword in self.keywords)


# =============================================================================
# TEMPLATES
# =============================================================================


DEBUGGING_TEMPLATE = DecompositionTemplate(
    name="debugging",
    keywords=("debug", "调试"),
    steps=(
        StepTemplate("问题分析", "分析和定位问题根源", TaskPriority.HIGH, ("analysis", "debugging")),
        StepTemplate("解决方案设计", "设计修复方案", TaskPriority.MEDIUM, ("design", "debugging")),
        StepTemplate("实施修复", "实施修复方案", TaskPriority.HIGH, ("implementation", "debugging")),
        StepTemplate("测试验证", "验证修复效果", TaskPriority.MEDIUM, ("testing", "verification")),
    ),
)

IMPLEMENTATION_TEMPLATE = DecompositionTemplate(
    name="implementation",
    keywords=("implement", "实现"),
    steps=(
        StepTemplate("需求分析", "分析功能需求和技术要求", TaskPriority.HIGH, ("analysis", "requirements")),
        StepTemplate("架构设计", "设计系统架构和接口", TaskPriority.HIGH, ("architecture", "design")),
        StepTemplate("核心实现", "实现核心功能逻辑", TaskPriority.HIGH, ("implementation", "core")),
        StepTemplate("测试编写", "编写单元测试和集成测试", TaskPriority.MEDIUM, ("testing", "quality")),
        StepTemplate("文档更新", "更新相关文档", TaskPriority.LOW, ("documentation",)),
    ),
)

GENERIC_TEMPLATE = DecompositionTemplate(
    name="generic",
    steps=(
        StepTemplate("任务分析", "分析任务要求和约束条件", TaskPriority.MEDIUM, ("analysis",)),
        StepTemplate("方案设计", "设计实施方案", TaskPriority.MEDIUM, ("design",)),
        StepTemplate("执行实施", "执行具体实施步骤", TaskPriority.HIGH, ("implementation",)),
        StepTemplate("结果验证", "验证执行结果", TaskPriority.MEDIUM, ("verification",)),
    ),
)

# Checked in order; the first match wins
DEFAULT_TEMPLATES: tuple[DecompositionTemplate, ...] = (
    DEBUGGING_TEMPLATE,
    IMPLEMENTATION_TEMPLATE,
)


class Decomposer:
    """
    Turn a request into an ordered, dependency-chained task set.

    Example:
        >>> decomposer = Decomposer()
        >>> decomposer.classify("调试JavaScript性能问题").name
        'debugging'
        >>> tasks = decomposer.build("调试JavaScript性能问题", store)
        >>> [t.title for t in tasks]
        ['问题分析', '解决方案设计', '实施修复', '测试验证']
        >>> tasks[1].dependencies == [tasks[0].id]
        True
    """

    def __init__(
        self,
        templates: tuple[DecompositionTemplate, ...] = DEFAULT_TEMPLATES,
        fallback: DecompositionTemplate = GENERIC_TEMPLATE,
    ) -> None:
        self.templates = templates
        self.fallback = fallback

    def classify(self, request: str) -> DecompositionTemplate:
        """
        Pick the template for a request.

        Args:
            request: Free-text request.

        Returns:
            The first template whose keywords appear in the request,
            or the fallback.
        """
        for template in self.templates:
            if template.matches(request):
                return template
        return self.fallback

    def decompose(self, request: str) -> list[TaskDraft]:
        """
        Expand a request into task drafts.

        Drafts carry no dependencies yet; ids only exist once the
        drafts are stored, see ``build``.

        Args:
            request: Non-empty free-text request.

        Returns:
            One draft per template step, in execution order.

        Raises:
            ValueError: If the request is blank.
        """
        if not request or not request.strip():
            raise ValueError("Request must be a non-empty string")

        template = self.classify(request)
        logger.info(f"Decomposing request with '{template.name}' template")

        return [
            TaskDraft(
                title=step.title,
                description=step.description,
                priority=step.priority,
                tags=list(step.tags),
                metadata=TaskMetadata(
                    source_request=request,
                    template=template.name,
                    step=index,
                ),
            )
            for index, step in enumerate(template.steps)
        ]

    def build(self, request: str, store: TaskStore) -> list[Task]:
        """
        Decompose a request and store the tasks as a linear chain.

        Args:
            request: Non-empty free-text request.
            store: Store that assigns ids.

        Returns:
            Stored tasks; each depends on the id of the one before it.
        """
        tasks: list[Task] = []

        for draft in self.decompose(request):
            if tasks:
                draft.dependencies = [tasks[-1].id]
            tasks.append(store.create(draft))

        logger.debug(f"Built chain: {' -> '.join(t.id for t in tasks)}")
        return tasks
