"""Build the Lambda deployment package for the consumer lifecycle handler.

Uses aws-lambda-builders to install the ``[lambda]`` extra dependencies for
the Lambda target platform, then copies the ``kinesis_consumer_handler``
package into the artifact. The handler itself only needs boto3, which the
Lambda runtime provides, so the build side (click, pyyaml,
aws-lambda-builders) never ends up in the zip.
"""

import importlib.metadata
import io
import shutil
import sys
import tempfile
import zipfile
from pathlib import Path

from ..exceptions import PackagingError
from ..models import DEFAULT_HANDLER


def _get_runtime_requirements() -> list[str]:
    """Read ``[lambda]`` extra dependencies from installed metadata.

    Returns:
        List of PEP 508 dependency strings (empty when nothing beyond the
        Lambda runtime is needed)
    """
    try:
        requires = importlib.metadata.requires("kinesis-consumer")
    except importlib.metadata.PackageNotFoundError:
        return []
    if requires is None:
        return []

    result = []
    for r in requires:
        if "extra == 'lambda'" in r or 'extra == "lambda"' in r:
            result.append(r.split(";")[0].strip())
    return result


def build_handler_package() -> bytes:
    """Build the handler deployment package.

    Installs ``[lambda]`` extra dependencies via aws-lambda-builders, then
    copies ``kinesis_consumer_handler/`` (all .py files).

    Returns:
        Zip file contents as bytes

    Raises:
        PackagingError: If dependency installation fails
    """
    from aws_lambda_builders.architecture import X86_64
    from aws_lambda_builders.builder import LambdaBuilder

    with tempfile.TemporaryDirectory() as temp_root:
        temp_path = Path(temp_root)
        source_dir = temp_path / "source"
        artifacts_dir = temp_path / "artifacts"
        scratch_dir = temp_path / "scratch"

        source_dir.mkdir()
        artifacts_dir.mkdir()
        scratch_dir.mkdir()

        requirements = _get_runtime_requirements()
        requirements_txt = source_dir / "requirements.txt"
        requirements_txt.write_text("\n".join(requirements) + "\n")

        # aws-lambda-builders requires a source directory; create minimal placeholder
        (source_dir / "__init__.py").touch()

        runtime = f"python{sys.version_info.major}.{sys.version_info.minor}"
        builder = LambdaBuilder(
            language="python",
            dependency_manager="pip",
            application_framework=None,
        )
        try:
            builder.build(
                source_dir=str(source_dir),
                artifacts_dir=str(artifacts_dir),
                scratch_dir=str(scratch_dir),
                manifest_path=str(requirements_txt),
                runtime=runtime,
                architecture=X86_64,
            )
        except Exception as e:
            raise PackagingError(f"Failed to install handler dependencies: {e}") from e

        placeholder = artifacts_dir / "__init__.py"
        if placeholder.exists():
            placeholder.unlink()

        import kinesis_consumer_handler

        handler_path = Path(kinesis_consumer_handler.__file__).parent
        dest_handler = artifacts_dir / "kinesis_consumer_handler"

        # Remove any pip-installed copy to use local version
        if dest_handler.exists():
            shutil.rmtree(dest_handler)

        for src_file in handler_path.rglob("*.py"):
            rel = src_file.relative_to(handler_path)
            dst = dest_handler / rel
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(src_file, dst)

        zip_buffer = io.BytesIO()
        with zipfile.ZipFile(zip_buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            for file_path in artifacts_dir.rglob("*"):
                if file_path.is_file():
                    arcname = file_path.relative_to(artifacts_dir)
                    zf.write(file_path, arcname)

        zip_buffer.seek(0)
        return zip_buffer.getvalue()


def write_handler_package(output_path: str | Path) -> int:
    """Build and write the handler package to a file.

    Args:
        output_path: Path where to write the zip file

    Returns:
        Size of the written file in bytes
    """
    zip_bytes = build_handler_package()
    output_path = Path(output_path)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(zip_bytes)

    return len(zip_bytes)


def get_handler_info() -> dict[str, str | int | list[str]]:
    """Get information about the handler package without building it."""
    import kinesis_consumer_handler

    handler_path = Path(kinesis_consumer_handler.__file__).parent
    py_files = list(handler_path.rglob("*.py"))
    total_size = sum(f.stat().st_size for f in py_files)

    return {
        "package_path": str(handler_path),
        "python_files": len(py_files),
        "uncompressed_size": total_size,
        "handler": DEFAULT_HANDLER,
        "runtime_dependencies": _get_runtime_requirements(),
    }
