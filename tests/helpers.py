"""Builders for google-genai response objects used across the test suite."""

from google.genai import types


def make_usage(prompt=0, candidates=0, total=None):
    return types.GenerateContentResponseUsageMetadata(
        prompt_token_count=prompt,
        candidates_token_count=candidates,
        total_token_count=prompt + candidates if total is None else total,
    )


def make_candidate(*parts, finish_reason=types.FinishReason.STOP, safety_ratings=None, citation_metadata=None):
    return types.Candidate(
        content=types.Content(role="model", parts=list(parts)),
        finish_reason=finish_reason,
        safety_ratings=safety_ratings,
        citation_metadata=citation_metadata,
    )


def make_response(*candidates, usage=None, prompt_feedback=None):
    return types.GenerateContentResponse(
        candidates=list(candidates),
        usage_metadata=usage,
        prompt_feedback=prompt_feedback,
    )


def text_response(text, usage=None, **candidate_kwargs):
    return make_response(make_candidate(types.Part(text=text), **candidate_kwargs), usage=usage)


def metric_values(run_context):
    return {counter.name: counter.value for counter in run_context.metrics}
