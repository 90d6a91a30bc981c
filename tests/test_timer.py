import asyncio

from spellcast.managers.timer import TimerManager


def test_timer_fires_once_and_clears_key():
    fired = []

    async def scenario():
        timer = TimerManager()

        async def callback():
            fired.append('done')

        assert timer.schedule('reset:ROOM', 0.01, callback)
        assert timer.pending('reset:ROOM')
        await asyncio.sleep(0.05)
        assert not timer.pending('reset:ROOM')

    asyncio.run(scenario())
    assert fired == ['done']


def test_cancel_prevents_callback():
    fired = []

    async def scenario():
        timer = TimerManager()

        async def callback():
            fired.append('done')

        timer.schedule('disconnect:p1', 0.01, callback)
        assert timer.cancel('disconnect:p1')
        assert not timer.cancel('disconnect:p1')
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert fired == []


def test_replace_and_keep_existing():
    fired = []

    async def scenario():
        timer = TimerManager()

        def record(label):
            async def callback():
                fired.append(label)
            return callback

        timer.schedule('reset:ROOM', 0.02, record('first'))
        assert timer.schedule('reset:ROOM', 0.02, record('second'))
        assert not timer.schedule('reset:ROOM', 0.02, record('third'), replace=False)
        await asyncio.sleep(0.08)

    asyncio.run(scenario())
    assert fired == ['second']


def test_failing_callback_is_logged(caplog):
    async def scenario():
        timer = TimerManager()

        async def boom():
            raise RuntimeError('boom')

        timer.schedule('reset:ROOM', 0, boom)
        await asyncio.sleep(0.02)

    asyncio.run(scenario())
    assert '[timer-error] key=reset:ROOM' in caplog.text


def test_cancel_all():
    async def scenario():
        timer = TimerManager()

        async def noop():
            pass

        timer.schedule('a', 1, noop)
        timer.schedule('b', 1, noop)
        timer.cancel_all()
        assert not timer.pending('a') and not timer.pending('b')

    asyncio.run(scenario())
