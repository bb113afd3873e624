"""Checking every exercise at once and writing a JSON report of the results."""

from __future__ import annotations

import json
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from collections.abc import Sequence

from rustdrills.exercise import Exercise, ExerciseFailed
from rustdrills.run import run

DEFAULT_OUTPUT_PATH = Path(".github/result/check_result.json")


@dataclass
class ExerciseResult:
    """Whether one exercise passed."""

    name: str
    result: bool


@dataclass
class ExerciseStatistics:
    """Totals over a checking run."""

    total_exercations: int
    total_succeeds: int = 0
    total_failures: int = 0
    total_time: int = 0


@dataclass
class ExerciseCheckList:
    """The full report of a checking run."""

    statistics: ExerciseStatistics
    exercises: list[ExerciseResult] = field(default_factory=list)
    user_name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "exercises": [{"name": e.name, "result": e.result} for e in self.exercises],
            "user_name": self.user_name,
            "statistics": {
                "total_exercations": self.statistics.total_exercations,
                "total_succeeds": self.statistics.total_succeeds,
                "total_failures": self.statistics.total_failures,
                "total_time": self.statistics.total_time,
            },
        }

    def to_json(self) -> str:
        """Return the report as indented JSON."""
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)


def cicv_verify(
    exercises: Sequence[Exercise],
    verbose: bool,
    output_path: str | os.PathLike[str] = DEFAULT_OUTPUT_PATH,
) -> ExerciseCheckList:
    """Run every exercise concurrently, record the results and write them as JSON."""
    started = int(time.time())
    total = len(exercises)
    lock = threading.Lock()
    rights = 0
    check_list = ExerciseCheckList(statistics=ExerciseStatistics(total_exercations=total))

    def check(exercise: Exercise, task_started: int) -> None:
        nonlocal rights
        try:
            run(exercise, True)
        except ExerciseFailed:
            passed = False
        else:
            passed = True
        with lock:
            if passed:
                rights += 1
                print(f"{exercise.name}执行成功")
            else:
                print(f"{exercise.name}执行失败")
            print(f"总的题目数: {total}")
            print(f"当前做正确的题目数: {rights}")
            print(f"当前修改试卷耗时: {int(time.time()) - task_started} s")
            check_list.exercises.append(ExerciseResult(name=exercise.name, result=passed))
            if passed:
                check_list.statistics.total_succeeds += 1
            else:
                check_list.statistics.total_failures += 1

    with ThreadPoolExecutor() as pool:
        futures = [pool.submit(check, exercise, int(time.time())) for exercise in exercises]
        for future in futures:
            future.result()

    total_time = int(time.time()) - started
    print(
        "===============================试卷批改完成,总耗时: "
        f"{total_time} s; =================================="
    )
    check_list.statistics.total_time = total_time
    Path(output_path).write_text(check_list.to_json(), encoding="utf-8")
    return check_list