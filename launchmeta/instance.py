import logging
import os
import time
from pathlib import Path
from typing import List, Optional, Protocol, Tuple

import pydantic

from .arguments import ArgumentBuilder, ArgumentContext, bind_account
from .common import Layout
from .common.mojang import INSTANCE_FILE, NATIVES_DIR
from .download import BatchResult, HashVerifiedDownloader
from .errors import DecodeError, LocalIOError, ManifestParseError
from .manifest import ManifestClient
from .model import Library
from .model.downloadable import ClassifierDownload, LibraryDownload
from .model.instance import Account, InstanceConfiguration
from .model.mojang import JarType, MojangVersion
from .natives import NativeExtractor
from .platform import Platform
from .rules import RuleEvaluator
from .runtime import RuntimeMaterializer

logger = logging.getLogger(__name__)


class InstanceStore(Protocol):
    def add_instance(self, config: InstanceConfiguration) -> None: ...


class JsonInstanceStore:
    """Keeps each instance configuration at instances/<name>/instance.json."""

    def __init__(self, layout: Layout):
        self.layout = layout

    def path(self, name: str) -> Path:
        return self.layout.instance_dir(name) / INSTANCE_FILE

    def add_instance(self, config: InstanceConfiguration) -> None:
        path = self.path(config.instance_name)
        try:
            os.makedirs(path.parent, exist_ok=True)
            config.write(path)
        except OSError as e:
            raise LocalIOError(f"Failed to save instance {config.instance_name}: {e}") from e

    def load(self, name: str) -> InstanceConfiguration:
        path = self.path(name)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return InstanceConfiguration.model_validate_json(f.read())
        except OSError as e:
            raise LocalIOError(f"Failed to read instance {name}: {e}") from e
        except UnicodeDecodeError as e:
            raise DecodeError(f"{path} is not valid UTF-8: {e}") from e
        except pydantic.ValidationError as e:
            raise ManifestParseError(f"Failed to parse {path}: {e}") from e

    def names(self) -> List[str]:
        if not self.layout.instances_dir.is_dir():
            return []
        return sorted(p.parent.name for p in self.layout.instances_dir.glob(f"*/{INSTANCE_FILE}"))


def launch_command(config: InstanceConfiguration, account: Account,
                   resolution: Optional[Tuple[int, int]] = None) -> List[str]:
    return [config.runtime_path] + bind_account(config.arguments, account, resolution)


def select_libraries(libraries: List[Library], evaluator: RuleEvaluator) -> List[Library]:
    return [lib for lib in libraries if lib.rules is None or evaluator.evaluate(lib.rules)]


def select_classifiers(libraries: List[Library], platform: Platform) -> List[ClassifierDownload]:
    classifiers = []
    for lib in libraries:
        key = lib.classifier_key(platform)
        if key is None:
            continue
        classifier = lib.classifier_download(key)
        if classifier is None:
            logger.error("Unknown classifier key %s for library %s", key, lib.name)
            continue
        classifiers.append(classifier)
    return classifiers


class InstanceOrchestrator:
    """
    Runs the whole "create instance" sequence against one ManifestClient.

    The first hard failure propagates. Shared artifacts that were already cached stay
    cached for the next attempt; only the instance directory may be left half built.
    """

    def __init__(self, client: ManifestClient, store: InstanceStore,
                 downloader: Optional[HashVerifiedDownloader] = None, platform: Optional[Platform] = None):
        self.client = client
        self.store = store
        self.downloader = downloader or HashVerifiedDownloader()
        self.platform = platform or client.platform
        self.evaluator = RuleEvaluator(self.platform)
        self.batches: List[Tuple[str, BatchResult]] = []

    @property
    def layout(self) -> Layout:
        return self.client.layout

    def create_instance(self, version_id: str, instance_name: str,
                        jar_type: JarType = JarType.Client) -> InstanceConfiguration:
        with self.client.lock:
            start = time.monotonic()
            self.batches = []
            version = self.client.fetch_version(version_id)
            version_type = self.client.get_version_entry(version_id).type or version.type or "release"

            libraries = select_libraries(version.libraries, self.evaluator)
            library_paths = self.download_libraries(libraries)
            classifiers = select_classifiers(libraries, self.platform)
            self.download("classifiers", classifiers, self.layout.libraries_dir)

            jar_path = self.client.fetch_game_jar(version, jar_type)
            java_path = self.install_java(version)

            logging_config = version.client_logging
            logging_path = None
            if logging_config is not None:
                logging_path = self.client.fetch_logging_config(logging_config)

            asset_index_name = self.download_assets(version)
            logger.info("Finished download instance in %dms", (time.monotonic() - start) * 1000)

            instance_dir = self.layout.instance_dir(instance_name)
            try:
                os.makedirs(instance_dir, exist_ok=True)
            except OSError as e:
                raise LocalIOError(f"Failed to create {instance_dir}: {e}") from e

            context = ArgumentContext(
                version_id=version.id,
                version_type=version_type,
                instance_dir=instance_dir.resolve(),
                assets_dir=self.layout.assets_dir.resolve(),
                asset_index_name=asset_index_name,
                library_paths=[p.resolve() for p in library_paths],
                jar_path=jar_path.resolve(),
                logging_path=logging_path.resolve() if logging_path else None,
            )
            arguments = ArgumentBuilder(context, self.platform).build(
                version.launch_arguments(),
                version.main_class,
                logging_config.argument if logging_config else None,
            )

            NativeExtractor(self.layout.libraries_dir).extract(classifiers, instance_dir / NATIVES_DIR)

            config = InstanceConfiguration(
                instance_name=instance_name,
                runtime_path=str(java_path.resolve()),
                arguments=arguments,
            )
            self.store.add_instance(config)
            logger.info("Created instance %s (%s)", instance_name, version_id)
            return config

    def download(self, label: str, items, base_dir: Path) -> BatchResult:
        logger.info("Downloading %d %s...", len(items), label)
        start = time.monotonic()
        result = self.downloader.fetch_all(items, base_dir)
        logger.info("Finished downloading %s in %dms - %s", label, (time.monotonic() - start) * 1000, result)
        self.batches.append((label, result))
        return result

    def download_libraries(self, libraries: List[Library]) -> List[Path]:
        downloads: List[LibraryDownload] = []
        for lib in libraries:
            download = lib.artifact_download()
            if download is not None:
                downloads.append(download)
        libraries_dir = self.layout.libraries_dir
        self.download("libraries", downloads, libraries_dir)
        return [d.path(libraries_dir) for d in downloads]

    def install_java(self, version: MojangVersion) -> Path:
        component = version.java_version.component
        index = self.client.fetch_java_index()
        runtime = self.client.select_java_runtime(index, component)
        logger.info("Downloading runtime: %s %s", component, runtime.version.name)
        manifest = self.client.fetch_java_runtime_manifest(runtime)
        materializer = RuntimeMaterializer(self.downloader, self.platform)
        java_path = materializer.materialize(manifest, self.layout.java_dir / runtime.version.name)
        if materializer.last_batch is not None:
            self.batches.append(("java", materializer.last_batch))
        return java_path

    def download_assets(self, version: MojangVersion) -> str:
        if version.asset_index is None:
            return version.assets or "legacy"
        asset_index = self.client.fetch_asset_index(version.asset_index)
        logger.info("Asset index %s has %d objects", version.asset_index.id, len(asset_index.objects))
        self.download("assets", asset_index.downloads(), self.layout.asset_objects_dir)
        return version.asset_index.id
