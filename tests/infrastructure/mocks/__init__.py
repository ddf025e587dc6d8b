from tests.infrastructure.mocks.host_mocks import (
    FakeAssetFactory,
    FakeClock,
    FakeExistenceQuery,
    RecordingPinger,
)

__all__ = [
    'FakeAssetFactory',
    'FakeClock',
    'FakeExistenceQuery',
    'RecordingPinger',
]
