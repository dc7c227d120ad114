import subprocess
from pathlib import Path

from .exception import InstallError
from .logging import get_logger

logger = get_logger('install')

PACKAGE_MANAGERS = ('npm', 'pnpm', 'yarn', 'bun')


def detect_package_manager(user_agent: str | None) -> str:
    """Detect the package manager that launched the process.

    Args:
        user_agent (str | None): The value of `npm_config_user_agent`, e.g.
            `pnpm/8.6.0 npm/? node/v18.16.0 linux x64`.

    Returns:
        str: The package manager name, `npm` if it cannot be determined.
    """
    if not user_agent:
        return 'npm'
    name = user_agent.split(' ', 1)[0].split('/', 1)[0]
    return name if name in PACKAGE_MANAGERS else 'npm'


def install_dependencies(project_dir: Path, package_manager: str = 'npm') -> None:
    """Install the dependencies of a freshly created project.

    Args:
        project_dir (Path): The project directory.
        package_manager (str): The package manager executable.
    """
    command = [package_manager, 'install']
    logger.debug('Running "%s" in %s', ' '.join(command), project_dir)
    try:
        subprocess.run(command, cwd=str(project_dir), check=True)
    except FileNotFoundError as e:
        raise InstallError(
            command=command, message=f'{package_manager} is not installed.'
        ) from e
    except subprocess.CalledProcessError as e:
        raise InstallError(
            command=command, message=f'exit status {e.returncode}'
        ) from e
