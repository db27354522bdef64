"""
계산 진단 채널

계산 코어는 직접 출력하지 않고, 대체값(fallback)을 사용할 때마다
Trace에 메시지를 남깁니다. 배치 분석기가 행 단위로 모아서 로그로 내보냅니다.
"""
from typing import List, Optional


class Trace:
    """계산 중 발생한 대체/경고 메시지 모음"""

    def __init__(self):
        self.messages: List[str] = []

    def warn(self, message: str) -> None:
        self.messages.append(message)

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self):
        return iter(self.messages)


def note(trace: Optional[Trace], message: str) -> None:
    """trace가 주어졌을 때만 메시지 기록"""
    if trace is not None:
        trace.warn(message)
