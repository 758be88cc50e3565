from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .logging_utils import DEFAULT_LOG_PATH


@dataclass(frozen=True)
class Versions:
    """Pinned versions of everything the installer puts on the machine."""

    python: str = "3.10"
    pytorch: str = "2.1.0"
    torchvision: str = "0.16.0"
    torchaudio: str = "2.1.0"
    tensorflow: str = "2.14.0"
    numpy: str = "1.24.3"
    pandas: str = "2.1.1"
    scikit_learn: str = "1.3.1"
    nvidia_driver: str = "535"
    tensorrt: str = "8.6.1"
    triton: str = "2.40.0"
    tvm: str = "0.15.0"
    openvino: str = "2023"


@dataclass(frozen=True)
class Paths:
    home: str = field(default_factory=lambda: str(Path.home()))
    install_dir: str = ""
    venv_dir: str = ""
    log_file: str = DEFAULT_LOG_PATH
    state_file: str = ""
    temp_prefix: str = "/tmp/oda-"

    def __post_init__(self) -> None:
        # Derived defaults follow `home` so a config can relocate everything at once.
        home = Path(self.home)
        if not self.install_dir:
            object.__setattr__(self, "install_dir", str(home / ".oda"))
        if not self.venv_dir:
            object.__setattr__(self, "venv_dir", str(home / ".oda-venv"))
        if not self.state_file:
            object.__setattr__(self, "state_file", str(Path(self.install_dir) / "state.json"))

    @property
    def shell_profiles(self) -> Tuple[str, str]:
        home = Path(self.home)
        return (str(home / ".zshrc"), str(home / ".bashrc"))

    @property
    def src_dir(self) -> str:
        return str(Path(self.install_dir) / "src")


@dataclass(frozen=True)
class Requirements:
    min_free_disk_gb: int = 20
    connectivity_host: str = "google.com"
    min_ubuntu_major: int = 20
    min_redhat_major: int = 8
    keepalive_interval_s: float = 60.0


@dataclass(frozen=True)
class Urls:
    torch_cuda_index: str = "https://download.pytorch.org/whl/cu118"
    torch_cpu_index: str = "https://download.pytorch.org/whl/cpu"
    nvidia_container_gpgkey: str = "https://nvidia.github.io/libnvidia-container/gpgkey"
    nvidia_container_deb_list: str = "https://nvidia.github.io/libnvidia-container/stable/deb/nvidia-container-toolkit.list"
    nvidia_container_rpm_repo: str = "https://nvidia.github.io/libnvidia-container/stable/rpm/nvidia-container-toolkit.repo"
    cuda_rhel_repo: str = "https://developer.download.nvidia.com/compute/cuda/repos/rhel{major}/x86_64/cuda-rhel{major}.repo"
    triton_image: str = "nvcr.io/nvidia/tritonserver"
    docker_convenience_script: str = "https://get.docker.com"
    docker_ce_rpm_repo: str = "https://download.docker.com/linux/centos/docker-ce.repo"
    nvidia_docker_base: str = "https://nvidia.github.io/nvidia-docker"
    microsoft_key: str = "https://packages.microsoft.com/keys/microsoft.asc"
    vscode_deb_repo: str = "https://packages.microsoft.com/repos/code"
    vscode_rpm_repo: str = "https://packages.microsoft.com/yumrepos/vscode"
    ohmyzsh_installer: str = "https://raw.github.com/ohmyzsh/ohmyzsh/master/tools/install.sh"
    llama_cpp_repo: str = "https://github.com/ggerganov/llama.cpp.git"
    tvm_repo: str = "https://github.com/apache/tvm"
    distiller_repo: str = "https://github.com/IntelLabs/distiller.git"
    ncnn_repo: str = "https://github.com/Tencent/ncnn.git"
    armnn_repo: str = "https://github.com/ARM-software/armnn.git"
    intel_gpg_key: str = "https://apt.repos.intel.com/intel-gpg-keys/GPG-PUB-KEY-INTEL-SW-PRODUCTS.PUB"
    openvino_apt: str = "https://apt.repos.intel.com/openvino/{release}"
    openvino_yum_repo: str = "https://yum.repos.intel.com/openvino/{release}/setup/intel-openvino-{release}.repo"


@dataclass(frozen=True)
class InstallerConfig:
    versions: Versions = field(default_factory=Versions)
    paths: Paths = field(default_factory=Paths)
    requirements: Requirements = field(default_factory=Requirements)
    urls: Urls = field(default_factory=Urls)


_SECTIONS = {
    "versions": Versions,
    "paths": Paths,
    "requirements": Requirements,
    "urls": Urls,
}


def _build_section(name: str, cls: Any, raw: Any) -> Any:
    if raw is None:
        return cls()
    if not isinstance(raw, dict):
        raise ValueError(f"config section {name!r} must be a mapping/object")
    known = {f.name: f for f in dataclasses.fields(cls)}
    unknown = sorted(set(raw) - set(known))
    if unknown:
        raise ValueError(f"Unknown keys in config section {name!r}: {', '.join(unknown)}")
    values: Dict[str, Any] = {}
    for key, value in raw.items():
        if value is None:
            raise ValueError(f"{name}.{key} must have a value")
        kind = known[key].type
        if kind in ("int", "float"):
            try:
                values[key] = int(value) if kind == "int" else float(value)
            except (TypeError, ValueError) as e:
                raise ValueError(f"{name}.{key} must be a number, got {value!r}") from e
        elif isinstance(value, float):
            # `python: 3.10` loads as 3.1
            raise ValueError(f"{name}.{key} must be a quoted string, got {value!r}")
        else:
            values[key] = str(value)
    return cls(**values)


def config_from_mapping(raw: Dict[str, Any]) -> InstallerConfig:
    unknown = sorted(set(raw) - set(_SECTIONS))
    if unknown:
        raise ValueError(f"Unknown config sections: {', '.join(unknown)}")
    return InstallerConfig(**{name: _build_section(name, cls, raw.get(name)) for name, cls in _SECTIONS.items()})


def load_config(path: Optional[str] = None) -> InstallerConfig:
    """Load installer configuration; defaults when no path is given."""

    if path is None:
        return InstallerConfig()

    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(path)

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ValueError("installer config must be YAML")

    try:
        import yaml  # type: ignore
    except Exception as e:
        raise RuntimeError("PyYAML is required to read the installer config") from e

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"malformed YAML: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError("installer config must contain a mapping/object")

    return config_from_mapping(raw)
