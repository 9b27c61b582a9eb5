"""Backend configuration read from the environment."""

import dataclasses
import os
from collections.abc import Mapping

from common.settings import ConfigurationError, require

HOSTED = 'hosted'
LOCAL = 'local'


@dataclasses.dataclass(frozen=True)
class BackendSettings:
    """Settings needed to construct the backend handle."""

    mode: str = HOSTED
    url: str = ''
    anon_key: str = ''
    data_dir: str = 'data'
    admin_email: str = ''
    admin_password: str = ''
    public_base_url: str = '/uploads'

    @property
    def uploads_dir(self) -> str:
        return os.path.join(self.data_dir, 'uploads')

    @property
    def database_url(self) -> str:
        return f'sqlite:///{self.data_dir}/tembaro.db'

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> 'BackendSettings':
        """Read settings, failing fast when required values are absent."""
        env = os.environ if environ is None else environ
        mode = env.get('BACKEND_MODE', HOSTED).strip().lower() or HOSTED

        if mode == HOSTED:
            return cls(
                mode=HOSTED,
                url=require('SUPABASE_URL', env).rstrip('/'),
                anon_key=require('SUPABASE_ANON_KEY', env),
            )
        if mode == LOCAL:
            return cls(
                mode=LOCAL,
                data_dir=env.get('DATA_DIR', 'data'),
                admin_email=require('ADMIN_EMAIL', env),
                admin_password=require('ADMIN_PASSWORD', env),
                public_base_url=env.get('PUBLIC_UPLOADS_URL', '/uploads').rstrip('/'),
            )
        raise ConfigurationError(
            f'Unknown BACKEND_MODE {mode!r}; expected {HOSTED!r} or {LOCAL!r}'
        )
