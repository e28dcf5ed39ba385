"""Evaluate many expressions with a bounded pool of worker processes."""
from multiprocessing import Pipe, Process, cpu_count
from multiprocessing.connection import Connection
from pathlib import Path
import time
from typing import List, Optional, TextIO, Tuple

from pydantic import BaseModel, ConfigDict, Field

from stack_calc.batch.worker import WorkerProcess
from stack_calc.common.logger import logger
from stack_calc.common.operations import OperationResult

# Seconds to wait between polls of busy workers
POLL_INTERVAL = 0.01


class RunnerConfig(BaseModel):
    """Settings of a batch run."""

    model_config = ConfigDict(frozen=True)

    output_file: Path = Field(..., description="Path to write evaluation results")
    max_workers: Optional[int] = Field(
        default=None, ge=1, description="Maximum number of live worker processes (default: CPU count)"
    )


class BatchRunner(BaseModel):
    """
    Evaluate expressions in worker processes and write results to disk.

    Features:
        - Spawns one worker process per expression.
        - Writes results immediately to disk as soon as a worker finishes.
        - Ensures each worker is destroyed immediately after finishing.
        - Keeps at most ``max_workers`` workers alive.
    """

    model_config = ConfigDict(frozen=True)

    config: RunnerConfig

    def _spawn_worker(self, expr: str, line_number: int) -> Tuple[Process, Connection, int]:
        """
        Spawn a WorkerProcess for the given expression and return process and pipe.

        :param str expr: Infix expression
        :param int line_number: Line number of expression in input

        :return: Tuple of (Process, parent_pipe, line_number)
        :rtype: Tuple[Process, Connection, int]
        """
        parent_conn, child_conn = Pipe(duplex=False)
        worker = WorkerProcess(conn=child_conn, expression=expr, line_number=line_number)
        process = Process(target=worker.run)
        process.start()
        # The child owns its end now
        child_conn.close()
        return process, parent_conn, line_number

    def _collect_finished_workers(
        self, active_workers: List[Tuple[Process, Connection, int]], f_out: TextIO
    ) -> List[OperationResult]:
        """
        Collect results from all workers that have sent their payload and write them to the output file.

        Finished workers are removed from the active_workers list.

        :param list active_workers: List of tuples (Process, Pipe, line_number)
        :param TextIO f_out: Open file handle for writing results

        :return: Results collected during this call
        :rtype: List[OperationResult]
        """
        collected: List[OperationResult] = []
        # Iterate in reverse to safely remove finished workers while iterating
        for i in reversed(range(len(active_workers))):
            proc, pipe_conn, line_number = active_workers[i]
            if not pipe_conn.poll():
                continue
            try:
                payload = pipe_conn.recv()
            except EOFError:
                # Worker died without sending anything
                proc.join()
                raise RuntimeError(
                    f"Worker for line {line_number} exited with code {proc.exitcode} without a result"
                ) from None
            pipe_conn.close()
            proc.join()
            active_workers.pop(i)

            result = OperationResult.model_validate(payload)
            f_out.write(result.format_line() + "\n")
            f_out.flush()
            collected.append(result)
        return collected

    def run(self, expressions: List[str]) -> List[OperationResult]:
        """
        Evaluate every expression and write one result line per expression.

        Lines are written in completion order; each starts with its input line number.

        :param List[str] expressions: Non-empty infix expressions

        :return: Results sorted by line number
        :rtype: List[OperationResult]
        """
        max_workers: int = min(self.config.max_workers or cpu_count(), max(len(expressions), 1))
        logger.info(f"Evaluating {len(expressions)} expressions with up to {max_workers} workers")

        results: List[OperationResult] = []
        active_workers: List[Tuple[Process, Connection, int]] = []

        with self.config.output_file.open("w", encoding="utf-8") as f_out:
            try:
                for line_number, expr in enumerate(expressions, start=1):
                    # Wait until a worker slot is available
                    while len(active_workers) >= max_workers:
                        results.extend(self._wait_for_workers(active_workers, f_out))

                    active_workers.append(self._spawn_worker(expr, line_number))

                # Collect remaining active workers
                while active_workers:
                    results.extend(self._wait_for_workers(active_workers, f_out))
            finally:
                self._reap_workers(active_workers)

        failed = sum(1 for r in results if not r.ok)
        logger.info(f"Wrote {len(results)} results to {self.config.output_file} ({failed} failed)")
        return sorted(results, key=lambda r: r.line)

    def _wait_for_workers(
        self, active_workers: List[Tuple[Process, Connection, int]], f_out: TextIO
    ) -> List[OperationResult]:
        collected = self._collect_finished_workers(active_workers, f_out)
        if not collected:
            time.sleep(POLL_INTERVAL)
        return collected

    @staticmethod
    def _reap_workers(active_workers: List[Tuple[Process, Connection, int]]) -> None:
        """
        Terminate and join every worker still listed, closing its pipe.

        :param list active_workers: List of tuples (Process, Pipe, line_number), emptied in place
        """
        for proc, pipe_conn, line_number in active_workers:
            if proc.is_alive():
                logger.warning(f"Terminating worker for line {line_number}")
                proc.terminate()
            proc.join()
            pipe_conn.close()
        active_workers.clear()
