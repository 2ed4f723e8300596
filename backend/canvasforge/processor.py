"""Main CanvasForge orchestrator."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed

from PIL import Image

from . import adjustments
from .codec import RasterCodec, get_codec, high_quality_resize
from .config import Config
from .enums import EnhanceMethod, FilterName, OutputFormat, RotateOperation, StrategyType
from .exceptions import (
    CodecUnavailableError,
    GenerativeFillError,
    GenerativeFillNoopError,
    ProcessingCancelledError,
    ProcessingError,
    ValidationError,
)
from .extension import (
    CanvasExtender,
    are_images_different,
    crop_to_aspect_ratio,
    crop_to_exact_dimensions,
)
from .generative import GenerativeBackend, GenerativeFillClient, create_backend
from .models import (
    AspectRatio,
    CancellationToken,
    CropRect,
    Dimensions,
    ExtensionStrategy,
    ImageBuffer,
    ImageMetadata,
    ProcessedImage,
    ProcessingOptions,
    ProcessingRequest,
)
from .output import auto_upscale_if_needed, encode_for_format
from .validators import validate_aspect_ratio, validate_dimensions, validate_quality
from .vector import VectorNativeProcessor, VectorOptimizer, is_svg, parse_svg

logger = logging.getLogger("canvasforge.processor")


def _checkpoint(cancel_token: CancellationToken | None, stage: str) -> None:
    if cancel_token is not None:
        cancel_token.check(stage)


class ImageProcessor:
    """Orchestrates resizing, extension and the single-image operations.

    Usage:
        processor = ImageProcessor()
        result = processor.process_image(
            data, Dimensions(800, 600), AspectRatio(9, 16),
            ProcessingOptions(Dimensions(1080, 1920)),
        )
    """

    def __init__(
        self,
        api_key: str | None = None,
        backend: GenerativeBackend | None = None,
        codec: RasterCodec | None = None,
        optimizer: VectorOptimizer | None = None,
        sleep: Callable[[float], None] = time.sleep,
        max_workers: int = 4,
    ) -> None:
        try:
            self.codec = codec or get_codec()
        except CodecUnavailableError as e:
            raise ProcessingError(f"Raster codec unavailable: {e}", stage="codec") from e

        self.backend = backend if backend is not None else create_backend(api_key)
        self.fill_client = (
            GenerativeFillClient(self.backend, self.codec, sleep=sleep) if self.backend else None
        )
        self.extender = CanvasExtender(self.codec)
        self.vector = VectorNativeProcessor(optimizer)
        self.max_workers = max_workers

    @property
    def ai_configured(self) -> bool:
        return self.fill_client is not None

    def process_image(
        self,
        buffer: bytes,
        original_dimensions: Dimensions | None,
        target: Dimensions | AspectRatio,
        options: ProcessingOptions,
        strategy: ExtensionStrategy | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> ProcessedImage:
        """Bring ``buffer`` to the aspect ratio of ``target``.

        The image is first expanded by ``Config.EXPANSION_FACTOR`` (generative
        fill, or the sampled edge color as fallback) and then center-cropped
        to the requested ratio. Vector input with SVG output never touches
        pixels.

        Args:
            buffer: Encoded raster or SVG markup.
            original_dimensions: Caller-reported size; the decoded size wins.
            target: Target dimensions (their ratio is used) or aspect ratio.
            options: Output format, quality and nominal target dimensions.
            strategy: Fill strategy; AI when a backend is configured.
            cancel_token: Checked between stages.

        Returns:
            ProcessedImage whose metadata is read from the produced buffer.

        Raises:
            ValidationError: If target, quality or dimensions are invalid.
            ProcessingCancelledError: If cancelled.
            ProcessingError: If a stage without fallback fails.
        """
        ratio = validate_aspect_ratio(target)
        validate_quality(options.quality)
        validate_dimensions(options.target_dimensions.width, options.target_dimensions.height)
        strategy = strategy or ExtensionStrategy.default(self.ai_configured)
        output_format = OutputFormat.parse(options.format)

        if is_svg(buffer) and output_format is OutputFormat.SVG:
            return self._process_vector(buffer, target, options, strategy, cancel_token)

        warnings: list[str] = []
        stage = "decode"
        try:
            _checkpoint(cancel_token, stage)
            image = self.codec.decode(buffer)
            working = Dimensions(*image.size)
            if original_dimensions is not None and original_dimensions != working:
                logger.debug(
                    "Reported size %dx%d differs from decoded %dx%d, using decoded",
                    original_dimensions.width, original_dimensions.height,
                    working.width, working.height,
                )

            expansion = working.scale(Config.EXPANSION_FACTOR)

            stage = "extend"
            _checkpoint(cancel_token, stage)
            expanded, used_fallback = self._extend(image, working, expansion, strategy, warnings, cancel_token)

            stage = "aspect_crop"
            _checkpoint(cancel_token, stage)
            cropped = crop_to_aspect_ratio(expanded, ratio, self.codec)

            stage = "encode"
            _checkpoint(cancel_token, stage)
            data = encode_for_format(cropped, options, self.codec)
        except (ProcessingCancelledError, ValidationError):
            raise
        except Exception as e:
            raise ProcessingError(f"{stage} failed: {e}", stage=stage) from e

        result = self._build_result(data, used_fallback=used_fallback, warnings=warnings)
        logger.info(
            "Processed %dx%d -> %dx%d %s (%d bytes, fallback=%s)",
            working.width, working.height, result.metadata.width, result.metadata.height,
            result.metadata.format, result.metadata.size_bytes, used_fallback,
        )
        return result

    def _extend(
        self,
        image: Image.Image,
        working: Dimensions,
        expansion: Dimensions,
        strategy: ExtensionStrategy,
        warnings: list[str],
        cancel_token: CancellationToken | None,
    ) -> tuple[Image.Image, bool]:
        """Expand ``image`` to ``expansion``; returns (image, used_fallback)."""
        if strategy.type is StrategyType.AI:
            if self.fill_client is None:
                message = "AI strategy requested but no generative backend is configured; used edge-color extension"
                logger.warning(message)
                warnings.append(message)
                return self.extender.extend(image, working, expansion), True
            try:
                return self._generative_extend(image, expansion, cancel_token), False
            except GenerativeFillError as e:
                logger.warning("Generative fill failed, falling back to edge-color extension: %s", e)
                warnings.append(f"Generative fill failed: {e}")
                _checkpoint(cancel_token, "fallback extension")
                return self.extender.extend(image, working, expansion), True
        elif strategy.type is StrategyType.DETERMINISTIC:
            return self.extender.extend(image, working, expansion), False

        raise ValidationError(f"Unknown extension strategy: {strategy.type}")

    def _generative_extend(
        self,
        image: Image.Image,
        expansion: Dimensions,
        cancel_token: CancellationToken | None,
    ) -> Image.Image:
        source = self.codec.to_buffer(image, Config.TRANSPORT_FORMAT.lower(), Config.TRANSPORT_QUALITY)
        candidate = self.fill_client.generate(source, expansion, cancel_token)
        _checkpoint(cancel_token, "similarity check")

        if not are_images_different(source, candidate, self.codec):
            raise GenerativeFillNoopError("Generative fill returned the input unchanged")

        try:
            result = self.codec.decode(candidate.data)
        except Exception as e:
            raise GenerativeFillError(f"Generated image could not be decoded: {e}") from e

        if result.size != expansion.to_tuple():
            logger.info(
                "Generated %dx%d instead of %dx%d, cover-cropping",
                result.width, result.height, expansion.width, expansion.height,
            )
            result = crop_to_exact_dimensions(result, expansion, self.codec)
        return result

    def _process_vector(
        self,
        buffer: bytes,
        target: Dimensions | AspectRatio,
        options: ProcessingOptions,
        strategy: ExtensionStrategy,
        cancel_token: CancellationToken | None,
    ) -> ProcessedImage:
        warnings: list[str] = []
        used_fallback = False
        if strategy.type is StrategyType.AI:
            message = "AI strategy is not available for vector output; substituted deterministic vector extension"
            logger.warning(message)
            warnings.append(message)
            used_fallback = True

        dimensions = target if isinstance(target, Dimensions) else options.target_dimensions

        _checkpoint(cancel_token, "vector")
        try:
            markup = self.vector.process(buffer, dimensions)
        except Exception as e:
            raise ProcessingError(f"vector failed: {e}", stage="vector") from e

        return self._build_result(markup.encode("utf-8"), used_fallback=used_fallback, warnings=warnings)

    def process_batch(
        self,
        requests: Iterable[ProcessingRequest],
        cancel_token: CancellationToken | None = None,
    ) -> dict[str, ProcessedImage]:
        """Process independent requests concurrently.

        Args:
            requests: Requests keyed by their ``name``.
            cancel_token: Shared token; cancels every pending request.

        Returns:
            Dict mapping name to ProcessedImage. Failed requests are logged
            and left out.
        """
        results: dict[str, ProcessedImage] = {}

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            futures = {
                pool.submit(
                    self.process_image,
                    request.buffer,
                    request.original_dimensions,
                    request.target,
                    request.options,
                    request.strategy,
                    cancel_token,
                ): request.name
                for request in requests
            }
            for future in as_completed(futures):
                name = futures[future]
                try:
                    results[name] = future.result()
                except Exception as e:
                    logger.error("Error processing %s: %s", name, e, exc_info=True)

        return results

    def get_image_dimensions(self, buffer: bytes) -> Dimensions:
        """Width and height as the pipeline would see them.

        SVG is measured at the rasterization density, like the raster path.
        """
        return self.codec.probe(buffer).dimensions

    def sharpen_image(
        self,
        buffer: bytes,
        fmt: OutputFormat | str = OutputFormat.JPEG,
        sharpness: float = Config.DEFAULT_SHARPNESS,
        quality: int = 90,
    ) -> ProcessedImage:
        image = self.codec.decode(buffer)
        return self._encode_result(adjustments.sharpen(image, sharpness), fmt, quality)

    def apply_filter(
        self,
        buffer: bytes,
        filter_name: FilterName | str,
        fmt: OutputFormat | str = OutputFormat.JPEG,
        quality: int = 90,
        intensity: float = 0.5,
    ) -> ProcessedImage:
        image = self.codec.decode(buffer)
        return self._encode_result(adjustments.apply_filter(image, filter_name, intensity), fmt, quality)

    def rotate_flip_image(
        self,
        buffer: bytes,
        operation: RotateOperation | str,
        custom_angle: float | None = None,
        fmt: OutputFormat | str = OutputFormat.JPEG,
        quality: int = 90,
        flip_horizontal: bool = False,
        flip_vertical: bool = False,
    ) -> ProcessedImage:
        image = self.codec.decode(buffer)
        rotated = adjustments.rotate_flip(image, operation, custom_angle, flip_horizontal, flip_vertical)
        return self._encode_result(rotated, fmt, quality)

    def convert_format(
        self,
        buffer: bytes,
        target_format: OutputFormat | str,
        quality: int = 90,
    ) -> ProcessedImage:
        """Re-encode ``buffer``; SVG to SVG is passed through untouched."""
        fmt = OutputFormat.parse(target_format)
        if fmt is OutputFormat.SVG and is_svg(buffer):
            parse_svg(buffer)
            return self._build_result(bytes(buffer))
        return self._encode_result(self.codec.decode(buffer), fmt, quality)

    def enhance_image_with_ai(
        self,
        buffer: bytes,
        fmt: OutputFormat | str = OutputFormat.JPEG,
        quality: int = 90,
        cancel_token: CancellationToken | None = None,
    ) -> ProcessedImage:
        """Same-size enhancement through the generative backend.

        Raises:
            GenerativeFillError: If no backend is configured or all attempts fail.
        """
        if self.fill_client is None:
            raise GenerativeFillError("AI enhancement requires a configured generative backend")

        image = self.codec.decode(buffer)
        source = self.codec.to_buffer(image, Config.TRANSPORT_FORMAT.lower(), Config.TRANSPORT_QUALITY)
        enhanced = self.fill_client.enhance(source, cancel_token)
        try:
            result = self.codec.decode(enhanced.data)
        except Exception as e:
            raise GenerativeFillError(f"Enhanced image could not be decoded: {e}") from e
        return self._encode_result(result, fmt, quality)

    def enhance_image(
        self,
        buffer: bytes,
        fmt: OutputFormat | str = OutputFormat.JPEG,
        method: EnhanceMethod | str = EnhanceMethod.AI,
        sharpness: float = Config.DEFAULT_SHARPNESS,
        cancel_token: CancellationToken | None = None,
    ) -> ProcessedImage:
        """Enhance with the chosen method, sharpening when AI is unavailable."""
        try:
            method = EnhanceMethod(method)
        except ValueError as e:
            raise ValidationError(f"Unknown enhancement method '{method}'") from e

        if method is EnhanceMethod.AI:
            try:
                return self.enhance_image_with_ai(buffer, fmt, cancel_token=cancel_token)
            except GenerativeFillError as e:
                logger.warning("AI enhancement failed, falling back to sharpening: %s", e)
                result = self.sharpen_image(buffer, fmt, sharpness)
                return ProcessedImage(
                    buffer=result.buffer,
                    metadata=result.metadata,
                    used_fallback=True,
                    warnings=(f"AI enhancement failed: {e}",),
                )

        if method is EnhanceMethod.ONNX:
            logger.info("ONNX enhancement is not available, using sharpening")
        return self.sharpen_image(buffer, fmt, sharpness)

    def upscale_image(
        self,
        buffer: bytes,
        target_dimensions: Dimensions,
        quality: int = 90,
        fmt: OutputFormat | str = OutputFormat.JPEG,
    ) -> ProcessedImage:
        """Resample to exactly ``target_dimensions``.

        LANCZOS when growing, BICUBIC when shrinking.
        """
        validate_dimensions(target_dimensions.width, target_dimensions.height)
        image = self.codec.decode(buffer)
        growing = target_dimensions.width * target_dimensions.height >= image.width * image.height
        kernel = Image.Resampling.LANCZOS if growing else Image.Resampling.BICUBIC
        logger.info(
            "Resampling %dx%d -> %dx%d with %s",
            image.width, image.height, target_dimensions.width, target_dimensions.height, kernel.name,
        )
        resized = high_quality_resize(image, target_dimensions.to_tuple(), kernel)
        return self._encode_result(resized, fmt, quality)

    def crop_image(
        self,
        buffer: bytes,
        rect: CropRect,
        fmt: OutputFormat | str = OutputFormat.JPEG,
        quality: int = 90,
    ) -> ProcessedImage:
        """Manual crop; vector input is rasterized first.

        Raises:
            CodecError: If ``rect`` falls outside the image.
        """
        if rect.width <= 0 or rect.height <= 0:
            raise ValidationError(f"Crop region must have a positive size, got {rect.width}x{rect.height}")
        image = self.codec.decode(buffer)
        return self._encode_result(self.codec.extract(image, rect), fmt, quality)

    def compress_image(
        self,
        buffer: bytes,
        quality: int | None = None,
        max_size_kb: float | None = None,
        max_size_percent: float | None = None,
    ) -> ProcessedImage:
        """Re-encode in the source format with an explicit quality or a byte budget.

        With a budget, quality starts at ``Config.COMPRESS_START_QUALITY`` and
        drops by ``Config.COMPRESS_STEP`` down to the soft floor, then on to
        the hard floor, until the output fits or the attempts run out. SVG
        input is rasterized and compressed as PNG.
        """
        if quality is not None:
            validate_quality(quality)

        fmt = "png" if is_svg(buffer) else self.codec.probe(buffer).format
        if fmt == "jpg":
            fmt = "jpeg"
        if fmt not in ("jpeg", "png", "webp"):
            fmt = "jpeg"

        image = self.codec.decode(buffer)

        target_bytes: float | None = None
        if max_size_kb is not None:
            target_bytes = max_size_kb * 1024
        elif max_size_percent is not None:
            target_bytes = len(buffer) * max_size_percent / 100

        if quality is not None or target_bytes is None:
            data = self.codec.encode(image, fmt, quality if quality is not None else 80)
            return self._build_result(data)

        current = Config.COMPRESS_START_QUALITY
        data = self.codec.encode(image, fmt, current)
        attempts = 0
        for floor in (Config.COMPRESS_SOFT_FLOOR, Config.COMPRESS_HARD_FLOOR):
            while len(data) > target_bytes and current > floor and attempts < Config.COMPRESS_MAX_ATTEMPTS:
                current = max(floor, current - Config.COMPRESS_STEP)
                data = self.codec.encode(image, fmt, current)
                attempts += 1
                logger.debug(
                    "Compression attempt %d: quality %d, %.2f KB / target %.2f KB",
                    attempts, current, len(data) / 1024, target_bytes / 1024,
                )

        if len(data) > target_bytes:
            logger.warning(
                "Could not reach %.2f KB, best effort %.2f KB at quality %d",
                target_bytes / 1024, len(data) / 1024, current,
            )
        return self._build_result(data)

    def auto_upscale_if_needed(self, processed: ProcessedImage) -> ProcessedImage:
        return auto_upscale_if_needed(processed, self.codec)

    def _encode_result(self, image: Image.Image, fmt: OutputFormat | str, quality: int) -> ProcessedImage:
        validate_quality(quality)
        options = ProcessingOptions(
            target_dimensions=Dimensions(image.width, image.height),
            quality=quality,
            format=OutputFormat.parse(fmt),
        )
        return self._build_result(encode_for_format(image, options, self.codec))

    def _build_result(
        self,
        data: bytes,
        used_fallback: bool = False,
        warnings: list[str] | tuple[str, ...] = (),
    ) -> ProcessedImage:
        """Wrap ``data`` with metadata read back from the bytes themselves."""
        if is_svg(data):
            size = parse_svg(data).intrinsic_size() or (0, 0)
            info = ImageBuffer(data=data, width=round(size[0]), height=round(size[1]), format="svg")
        else:
            info = self.codec.probe(data)

        return ProcessedImage(
            buffer=data,
            metadata=ImageMetadata(
                width=info.width,
                height=info.height,
                format=info.format,
                size_bytes=len(data),
            ),
            used_fallback=used_fallback,
            warnings=tuple(warnings),
        )
