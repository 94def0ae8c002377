"""OpenAI API integration for taskmatrix.

This module provides the remote classifier: it sends the task text, the current
time and the optional due time to OpenAI and returns the raw urgency/importance
scores with explanations. The result is corrected by the guardrail engine
before it becomes a record.
"""

import os
import json
import logging
from typing import Optional
from openai import OpenAI, APIError, APIConnectionError, APITimeoutError

from taskmatrix.config import OPENAI_MODEL, OPENAI_TIMEOUT_SEC, TIME_ZONE
from taskmatrix.engine.urgency import due_delta, to_local_datetime
from taskmatrix.models.classification import RawClassification

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = """你是一个专业的任务分类助手，专门为一位跨境电商PM服务（负责产品、供应链、运营、财务和合规）。
你的任务：根据输入的任务文本（可能包含截止日期），按照艾森豪威尔矩阵进行分类，并给出专业的中文解释。

评分模型：
计算 U（紧急度）和 I（重要性），分值 0-100。

紧急度 U = 时间信号 (0-60) + 阻塞信号 (0-25) + 恶化/风险倒计时 (0-15)

【时间计算强规则】
模型默认不知道当前时间。若用户提供了“当前时间(now)”和“截止时间(due)”或“距离截止还有X小时/天”，你必须以这些信息为准计算时间差，不要根据年份或主观猜测远近。

- 时间信号 (若用户提供了明确截止日期/时间差，请优先使用以下逻辑覆盖关键词推断):
  * 距离截止时间 <= 24h => +60
  * 24h - 72h => +45
  * 3 - 7 天 => +30
  * > 7 天 => +10
- 关键词推断 (仅在无明确截止日期时使用): 今天/EOD (+60), 2-3天 (+45), 1周 (+30), ASAP/紧急/催 (+35), 无 (+0)。
- 阻塞信号：阻碍发货/生产/上架/支付 (+25), 影响协作但非硬阻塞 (+15), 无 (+0)。
- 恶化/风险：持续恶化（差评、评分下降、罚款、断货） (+15), 可能恶化 (+8), 稳定 (+0)。

重要性 I = 影响范围 (0-40) + 风险等级 (0-30) + 战略杠杆 (0-20) + 可授权调整 (-10 到 +10)
- 影响范围：直接影响利润/现金流/核心SKU/大客户 (+40), 中等运营影响/效率 (+25), 轻微 (+5~10)。
- 风险等级：安全/法律/税务/合规红线 (+30), 投诉升级/评分退货大幅受损 (+20), 一般质量/UX问题 (+10), 无明确风险 (+0)。
- 战略杠杆：建立SOP/系统/看板/标准化模型 (+20), 部分复用 (+10), 一次性任务 (+0~5)。
- 可授权性：必须本人处理 (+10), 可授权执行但需审核 (+0), 明确可授权/行政类 (-10)。

象限阈值：U >= 60 且 I >= 60 为 Q1；U < 60 且 I >= 60 为 Q2；U >= 60 且 I < 60 为 Q3；其余为 Q4。

【跨境电商特化规则】
- 若任务包含: 说明书/包装/外箱/内盒/箱唛/标签/label/标识/合规标识(CE/RoHS等)，则重要性通常较高：风险等级至少按“投诉升级/评分退货大幅受损(+20)”或更高评估；并尽量让 I >= 70（除非明确是非核心、可忽略的小事）。

建议后续行动 (nextAction) 逻辑:
- 若包含行政/执行关键词 (录入, 建档, 创建SKU, 交接, 转发, 跟单, 排版, 出稿): 建议为 "建议：委派执行 + 你做最终审核"。
- 若包含高风险关键词 (安全, 合规, 税务, 诉讼, 立案, 平台政策, 海关, 受伤): 建议为 "建议：你主导处理（高风险不可完全委派）"。
- 若属于 Q1: "建议：立即处理"。
- 若属于 Q2: "建议：安排时间块处理 (Time-block)"。
- 若需要决策: "建议：需要拍板决策"。

必须以 JSON 格式返回，包含字段：quadrant (例如 "Q1 - 立即执行"), u, i, explanation { urgency, importance, nextAction }。
只返回 JSON 对象，不要包含其他文本。"""

DEFAULT_ERROR_MESSAGE = "分析失败。请检查网络连接或 API 配置。"


class ClassificationError(Exception):
    """Remote classification failed; the message is safe to show to the user."""


def _format_timestamp(timestamp: int, time_zone: str) -> str:
    return to_local_datetime(timestamp, time_zone).strftime("%Y-%m-%d %H:%M %Z")


def build_user_prompt(text: str, due_at: Optional[int], now: int, time_zone: str = TIME_ZONE) -> str:
    """Build the user prompt with explicit now/due times.

    The model does not know the current time, so it is always stated, together
    with the remaining (or overdue) time when a due time is given.
    """
    prompt = f'请分类此任务: "{text}"'
    prompt += f"\n当前时间(now): {_format_timestamp(now, time_zone)} (timeZone: {time_zone})"
    if due_at is not None:
        delta = due_delta(due_at, now)
        delta_str = f"{f'{delta.days}天 ' if delta.days > 0 else ''}{delta.hours}小时 {delta.minutes}分钟"
        prompt += f"\n截止时间(due): {_format_timestamp(due_at, time_zone)} (timeZone: {time_zone})"
        prompt += f"\n已逾期: {delta_str}" if delta.overdue else f"\n距离截止还有: {delta_str}"
    return prompt


def _strip_code_fences(content: str) -> str:
    """Remove markdown code fences some models wrap around JSON."""
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


class OpenAIClassifier:
    """Task classifier backed by the OpenAI chat completions API."""

    def __init__(self, api_key: Optional[str] = None, model: str = OPENAI_MODEL, time_zone: str = TIME_ZONE):
        """Initialize OpenAI classifier.

        Args:
            api_key: OpenAI API key. If None, reads from OPENAI_API_KEY environment variable.
            model: Chat model name
            time_zone: Zone used to format timestamps in the prompt

        Note:
            Without an API key the classifier still initializes, but every
            classify() call raises ClassificationError.
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.model = model
        self.time_zone = time_zone
        self.client = None

        if self.api_key:
            self.client = OpenAI(api_key=self.api_key, timeout=OPENAI_TIMEOUT_SEC)
        else:
            logger.warning("OPENAI_API_KEY not found in environment. Classification will not be available.")

    def classify(self, text: str, due_at: Optional[int], now: int) -> RawClassification:
        """Classify a task into urgency/importance scores.

        Args:
            text: Task description
            due_at: Due timestamp (ms) or None
            now: Current timestamp (ms)

        Returns:
            RawClassification (missing fields defaulted)

        Raises:
            ClassificationError: If the client is not configured, the API call
                fails, or the response is not valid JSON
        """
        if not self.client:
            raise ClassificationError("未配置 OPENAI_API_KEY，无法进行任务分析。")

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_user_prompt(text, due_at, now, self.time_zone)},
                ],
                response_format={"type": "json_object"},
                temperature=0.3,  # Lower temperature for more deterministic scores
            )
        except APIError as e:
            # Don't log full error message as it might contain sensitive info
            error_code = getattr(e, "code", None)
            status_code = getattr(e, "status_code", None)

            if error_code == "insufficient_quota":
                logger.warning("OpenAI API quota insufficient. Please check billing/payment method in OpenAI dashboard.")
                raise ClassificationError("OpenAI API 额度不足，请检查账户配额。") from e
            if status_code == 429:
                logger.warning("OpenAI API rate limit exceeded. Please wait before retrying.")
                raise ClassificationError("OpenAI API 请求过于频繁，请稍后重试。") from e
            if isinstance(e, (APIConnectionError, APITimeoutError)):
                logger.error(f"OpenAI API connection error: {type(e).__name__}")
            else:
                logger.error(f"OpenAI API error: {status_code or 'unknown'} ({error_code or 'unknown'})")
            raise ClassificationError(DEFAULT_ERROR_MESSAGE) from e

        content = (response.choices[0].message.content or "").strip()
        try:
            payload = json.loads(_strip_code_fences(content) or "{}")
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse OpenAI JSON response: {e}. Response: {content[:100]}")
            raise ClassificationError("分析结果解析失败，请重试。") from e

        result = RawClassification.from_payload(payload)
        logger.debug(f"OpenAI classified task: quadrant={result.quadrant!r} u={result.u} i={result.i}")
        return result
