"""Evaluate a batch of expressions using worker processes."""
from multiprocessing import Pipe, Process, cpu_count
from multiprocessing.connection import Connection, wait
from pathlib import Path
from typing import List, TextIO, Tuple

from pydantic import BaseModel, Field

from prodcalc.batch.worker import EvaluationWorker
from prodcalc.common.config import CalculatorConfig
from prodcalc.common.logger import logger
from prodcalc.common.models import OperationResult


ActiveWorker = Tuple[Process, Connection, EvaluationWorker]


class BatchRunner(BaseModel):
    """
    Evaluates many expressions, one worker process per expression.

    Features:
        - Writes each result to disk as soon as its worker finishes.
        - Ensures each worker is joined immediately after finishing.
        - Keeps at most ``settings.max_workers`` workers alive (CPU count by default).
    """

    output_file: Path = Field(..., description="Path to write computation results")
    settings: CalculatorConfig = Field(default_factory=CalculatorConfig, description="Batch settings")

    def _max_workers(self, count: int) -> int:
        limit = self.settings.max_workers or cpu_count()
        return max(1, min(limit, count))

    def _spawn_worker(self, expr: str, line_number: int) -> ActiveWorker:
        """
        Spawn an EvaluationWorker for the given expression.

        :param str expr: Arithmetic expression
        :param int line_number: Line number of expression in input

        :return: Tuple of (Process, parent connection, worker)
        :rtype: ActiveWorker
        """
        parent_conn, child_conn = Pipe()
        worker = EvaluationWorker(conn=child_conn, expression=expr, line_number=line_number)
        process = Process(target=worker.run)
        process.start()
        # The child holds its own copy of this end
        child_conn.close()
        return process, parent_conn, worker

    def _receive(self, pipe_conn: Connection, worker: EvaluationWorker) -> OperationResult:
        try:
            return OperationResult(**pipe_conn.recv())
        except EOFError:
            logger.error(f"Worker on line {worker.line_number} exited without a result")
            return OperationResult(
                expression=worker.expression,
                line=worker.line_number,
                error_kind="WorkerError",
                error="worker exited without a result",
            )
        finally:
            pipe_conn.close()

    def _collect_finished_workers(
        self, active_workers: List[ActiveWorker], f_out: TextIO, results: List[OperationResult]
    ) -> None:
        """
        Block until at least one worker is done, then collect every finished worker.

        Finished workers are removed from active_workers and their results appended to results.

        :param list active_workers: List of (Process, Connection, EvaluationWorker)
        :param TextIO f_out: Open file handle for writing results
        :param list results: Collected results
        """
        # A finished worker has either sent its result or closed its end of the pipe
        ready = wait([pipe_conn for _, pipe_conn, _ in active_workers])

        # Iterate in reverse to safely remove finished workers while iterating
        for i in reversed(range(len(active_workers))):
            proc, pipe_conn, worker = active_workers[i]
            if pipe_conn not in ready:
                continue
            result = self._receive(pipe_conn, worker)
            proc.join()
            active_workers.pop(i)

            # Write output immediately
            f_out.write(result.to_line() + "\n")
            f_out.flush()
            results.append(result)

    def run(self, expressions: List[str]) -> List[OperationResult]:
        """
        Evaluate all expressions and write one result line per expression.

        Lines are written in completion order; the returned list is ordered by line number.

        :param List[str] expressions: Non-empty expressions, line numbers start at 1

        :return: Results ordered by line number
        :rtype: List[OperationResult]
        """
        results: List[OperationResult] = []
        max_workers = self._max_workers(len(expressions))
        logger.info(f"Evaluating {len(expressions)} expressions with up to {max_workers} workers")

        with self.output_file.open("w", encoding="utf-8") as f_out:
            active_workers: List[ActiveWorker] = []
            for line_number, expr in enumerate(expressions, start=1):
                # Wait until a worker slot is available
                while len(active_workers) >= max_workers:
                    self._collect_finished_workers(active_workers, f_out, results)

                active_workers.append(self._spawn_worker(expr, line_number))

            # Collect remaining active workers
            while active_workers:
                self._collect_finished_workers(active_workers, f_out, results)

        failed = sum(1 for r in results if not r.ok)
        logger.info(f"Results written to {self.output_file} ({failed} failed)")
        return sorted(results, key=lambda r: r.line)
