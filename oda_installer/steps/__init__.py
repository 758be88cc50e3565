from .step_10_base_packages import BasePackagesStep
from .step_20_install_python import InstallPythonStep
from .step_30_python_env import PythonEnvStep
from .step_40_nvidia_stack import NvidiaStackStep
from .step_50_container_runtime import ContainerRuntimeStep
from .step_60_dev_tools import DevToolsStep
from .step_70_ai_tools import AIToolsStep
from .step_90_cleanup import CleanupStep

__all__ = [
    "BasePackagesStep",
    "InstallPythonStep",
    "PythonEnvStep",
    "NvidiaStackStep",
    "ContainerRuntimeStep",
    "DevToolsStep",
    "AIToolsStep",
    "CleanupStep",
]
