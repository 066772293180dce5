import os
import signal
import threading

import pytest

from ralph.pipeline import RunContext
from ralph.pipeline.signals import stop_between_stages


@pytest.mark.unit
def test_first_signal_requests_stop_second_interrupts(tmp_path):
    context = RunContext(out_dir=tmp_path)

    with stop_between_stages(context):
        os.kill(os.getpid(), signal.SIGTERM)
        assert context.stop_requested is True

        with pytest.raises(KeyboardInterrupt):
            os.kill(os.getpid(), signal.SIGTERM)


@pytest.mark.unit
def test_previous_handlers_are_restored(tmp_path):
    before = signal.getsignal(signal.SIGINT)

    with stop_between_stages(RunContext(out_dir=tmp_path)):
        assert signal.getsignal(signal.SIGINT) is not before

    assert signal.getsignal(signal.SIGINT) is before


@pytest.mark.unit
def test_outside_main_thread_is_a_no_op(tmp_path):
    context = RunContext(out_dir=tmp_path)
    errors = []

    def worker():
        try:
            with stop_between_stages(context):
                pass
        except Exception as e:  # pragma: no cover
            errors.append(e)

    t = threading.Thread(target=worker)
    t.start()
    t.join()

    assert errors == []
    assert context.stop_requested is False
