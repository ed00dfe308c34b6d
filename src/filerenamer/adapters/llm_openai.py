from __future__ import annotations

import base64
import json
import logging

import requests

from filerenamer.ports.llm_port import LLMPort

logger = logging.getLogger(__name__)


class OpenAILLMAdapter(LLMPort):
    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str,
        vision_model: str | None = None,
        timeout: float = 60.0,
        max_output_tokens: int = 600,
    ) -> None:
        self._api_key = api_key
        self._model = model
        self._vision_model = vision_model or model
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._max_output_tokens = max_output_tokens

    def generate_text(self, system_prompt: str, user_prompt: str) -> str:
        if not self._api_key:
            return ""
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        payload = self._post_response(
            messages,
            model=self._model,
            response_format={"type": "json_object"},
        )
        if payload is None:
            return ""
        return self._extract_output_text(payload)

    def describe_image(self, image_bytes: bytes, mime_type: str, instruction: str) -> str:
        if not self._api_key or not image_bytes:
            return ""
        data_url = self._to_data_url(image_bytes, mime_type)
        messages = [
            {
                "role": "user",
                "content": [
                    {"type": "input_text", "text": instruction},
                    {"type": "input_image", "image_url": data_url},
                ],
            }
        ]
        payload = self._post_response(messages, model=self._vision_model)
        if payload is None:
            return ""
        return self._extract_output_text(payload)

    def _post_response(
        self,
        messages: list[dict],
        model: str,
        response_format: dict | None = None,
    ) -> dict | None:
        body: dict[str, object] = {
            "model": model,
            "input": self._to_response_input(messages),
            "temperature": 0.0,
            "max_output_tokens": self._max_output_tokens,
        }
        if response_format is not None:
            body["text"] = {"format": response_format}
        try:
            response = requests.post(
                f"{self._base_url}/responses",
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
                json=body,
                timeout=self._timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("LLM request to model %s failed: %s", model, exc)
            return None
        try:
            return response.json()
        except ValueError:
            logger.warning("LLM response from model %s was not JSON", model)
            return None

    @staticmethod
    def _extract_output_text(payload: dict) -> str:
        direct_text = payload.get("output_text")
        if isinstance(direct_text, str) and direct_text.strip():
            return direct_text.strip()
        output_items = payload.get("output", [])
        for item in output_items:
            content = item.get("content") or []
            for block in content:
                if block.get("type") in {"output_text", "text"}:
                    return (block.get("text") or "").strip()
                if block.get("type") == "output_json":
                    json_payload = block.get("json")
                    if json_payload is None:
                        continue
                    return json.dumps(json_payload)
        return ""

    @staticmethod
    def _to_data_url(image_bytes: bytes, mime_type: str) -> str:
        encoded = base64.b64encode(image_bytes).decode("ascii")
        return f"data:{mime_type or 'image/png'};base64,{encoded}"

    @staticmethod
    def _to_response_input(messages: list[dict]) -> list[dict]:
        converted = []
        for message in messages:
            role = message.get("role")
            content = message.get("content", "")
            if isinstance(content, str):
                content_items = [{"type": "input_text", "text": content}]
            elif isinstance(content, list):
                content_items = content
            else:
                content_items = [{"type": "input_text", "text": str(content)}]
            converted.append({"role": role, "content": content_items})
        return converted
