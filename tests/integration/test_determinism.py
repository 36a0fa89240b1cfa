"""Cross-process determinism of the vector and raster generators.

Each avatar is rendered in a fresh interpreter and compared byte for byte
with the same avatar rendered in the test process.
"""

from __future__ import annotations

import hashlib
import subprocess
import sys
import textwrap

import pytest

from avatarforge.core.transients import FileTransientStore
from avatarforge.generators.icon_types import IconType, create_generators
from avatarforge.imaging.editor import ImageEditor

SCRIPT = textwrap.dedent(
    """
    import hashlib
    import sys
    from pathlib import Path

    from avatarforge.core.config import AvatarForgeConfig
    from avatarforge.core.transients import FileTransientStore
    from avatarforge.generators.icon_types import IconType, create_generators
    from avatarforge.imaging.editor import ImageEditor

    root, icon_type, seed, size = Path(sys.argv[1]), sys.argv[2], sys.argv[3], int(sys.argv[4])
    config = AvatarForgeConfig(
        _env_file=None,
        cache_dir=root / "cache",
        transients_dir=root / "subprocess-transients",
        parts_dir=root / "parts",
    )
    generators = create_generators(config, FileTransientStore(config.transients_dir), ImageEditor())
    image = generators[IconType(icon_type)].build(seed, size)
    print(hashlib.sha256(image.data).hexdigest())
    """
)


@pytest.mark.parametrize(
    "icon_type, size",
    [
        (IconType.RETRO, 100),
        (IconType.JDENTICON, 100),
        (IconType.RINGS, 100),
        (IconType.ROBOHASH, 100),
        (IconType.WAVATAR, 80),
        (IconType.MONSTER_ID, 96),
        (IconType.BIRD, 64),
    ],
)
def test_build_identical_across_processes(test_config, temp_dir, clock, seed, icon_type, size):
    generators = create_generators(test_config, FileTransientStore(test_config.transients_dir, clock=clock), ImageEditor())
    expected = hashlib.sha256(generators[icon_type].build(seed, size).data).hexdigest()

    result = subprocess.run(
        [sys.executable, "-c", SCRIPT, str(temp_dir), icon_type.value, seed, str(size)],
        capture_output=True,
        text=True,
        check=True,
        timeout=120,
    )

    assert result.stdout.strip() == expected
