# ruff: noqa: E501

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator

from fastapi import APIRouter, Query
from fastapi.responses import HTMLResponse, JSONResponse, Response, StreamingResponse

from movie_agent.core.completion import AnthropicCompletionClient, Completer
from movie_agent.core.config import Settings
from movie_agent.core.models import MOODS, WATCHING_WITH, MovieRecommendation, PipelineState
from movie_agent.core.pipeline import iter_pipeline
from movie_agent.core.posters import get_poster, imdb_url, rotten_tomatoes_search_url
from movie_agent.core.progress import progress_for
from movie_agent.core.recommender import recommend
from movie_agent.core.schemas import (
    ErrorResponse,
    PlaceholderOut,
    PosterResponse,
    RecommendRequest,
    RecommendResponse,
)

router = APIRouter()

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    405: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def build_completion_client(settings: Settings) -> Completer:
    # Raises CompletionConfigError when no credential is configured.
    return AnthropicCompletionClient.from_settings(settings)


def _dump_recommendations(recs: Iterable[MovieRecommendation]) -> list[dict]:
    # Field values are passed through as the model produced them.
    return [r.to_dict() for r in recs]


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.options("/api/recommend", status_code=204)
@router.options("/api/recommend/stream", status_code=204)
def recommend_preflight() -> Response:
    return Response(status_code=204)


@router.post("/api/recommend", response_model=RecommendResponse, responses=_ERROR_RESPONSES)
def recommend_movies(req: RecommendRequest) -> JSONResponse:
    settings = Settings.from_env()
    client = build_completion_client(settings)

    outcome = recommend(req.to_preferences(), client, settings)
    recs = _dump_recommendations(outcome.recommendations)

    if outcome.error is None:
        return JSONResponse(content={"recommendations": recs})

    # The pipeline reached its error terminal; status is a deployment choice.
    if settings.pipeline_error_status == 200:
        return JSONResponse(content={"recommendations": recs, "error": outcome.error})
    return JSONResponse(
        status_code=settings.pipeline_error_status, content={"error": outcome.error}
    )


def _state_event(state: PipelineState) -> dict:
    progress = progress_for(state.current_step)
    body = state.to_dict()
    body.pop("userPreferences", None)
    body["recommendations"] = _dump_recommendations(state.recommendations)
    body["progress"] = (
        None
        if progress is None
        else {"label": progress.label, "index": progress.index, "total": progress.total}
    )
    return body


@router.post("/api/recommend/stream", responses=_ERROR_RESPONSES)
def recommend_movies_stream(req: RecommendRequest) -> StreamingResponse:
    """Stream every pipeline state as one NDJSON line.

    Configuration errors surface before the stream starts.
    """

    settings = Settings.from_env()
    client = build_completion_client(settings)
    preferences = req.to_preferences()

    def _events() -> Iterator[str]:
        for state in iter_pipeline(
            preferences, client, empty_search_policy=settings.empty_search_policy
        ):
            yield json.dumps(_state_event(state)) + "\n"

    return StreamingResponse(_events(), media_type="application/x-ndjson")


@router.get("/api/posters/{imdb_id}", response_model=PosterResponse)
def poster(imdb_id: str, title: str = Query(default="")) -> PosterResponse:
    settings = Settings.from_env()
    found = get_poster(imdb_id, title, api_key=settings.omdb_api_key)
    return PosterResponse(
        imdb_id=found.imdb_id,
        poster_url=found.poster_url,
        imdb_url=imdb_url(imdb_id),
        rotten_tomatoes_url=rotten_tomatoes_search_url(title),
        placeholder=PlaceholderOut(
            initials=found.placeholder.initials,
            background=found.placeholder.background,
            foreground=found.placeholder.foreground,
        ),
    )


def _options(values: tuple[str, ...]) -> str:
    return "\n".join(
        f'<option value="{v}">{v.replace("-", " ").title()}</option>' for v in values
    )


@router.get("/", response_class=HTMLResponse)
def index() -> HTMLResponse:
    """Single-page UI: preferences form, live progress, result cards."""

    html_doc = """<!doctype html>
<html lang=\"en\">
<head>
  <meta charset=\"utf-8\" />
  <meta name=\"viewport\" content=\"width=device-width, initial-scale=1\" />
  <title>Movie Night Agent</title>
  <style>
    :root {
      --bg: #0b0b0f;
      --panel: #17171f;
      --panel-soft: #22222c;
      --text: #f4f4f6;
      --muted: #a1a1aa;
      --line: #2e2e3a;
      --accent: #e50914;
    }
    * { box-sizing: border-box; }
    body { margin: 0; color: var(--text); background: var(--bg); font-family: ui-sans-serif, system-ui, sans-serif; min-height: 100vh; }
    .container { max-width: 72rem; margin: 0 auto; padding: 1rem; }
    header h1 { margin: 0; font-size: 1.6rem; }
    .muted { color: var(--muted); }
    .card { border: 1px solid var(--line); border-radius: 1rem; background: var(--panel); padding: 1rem; margin-top: 1rem; }
    label { display: block; font-size: .88rem; margin: .6rem 0 .25rem 0; color: var(--muted); }
    input, select, button { font: inherit; color: inherit; }
    select, input[type=text] { width: 100%; padding: .6rem .7rem; border-radius: .6rem; border: 1px solid var(--line); background: var(--panel-soft); }
    input[type=range] { width: 100%; }
    button { margin-top: .9rem; padding: .6rem 1.1rem; border-radius: .6rem; border: none; background: var(--accent); cursor: pointer; font-weight: 700; }
    button:disabled { opacity: .5; cursor: not-allowed; }
    .progress-label { font-size: 1.1rem; text-align: center; }
    .dots { display: flex; gap: .4rem; justify-content: center; margin-top: .6rem; }
    .dot { height: .5rem; width: .5rem; border-radius: 999px; background: var(--line); }
    .dot.done { background: var(--accent); }
    .dot.active { width: 1.5rem; background: var(--accent); }
    .rec-grid { display: grid; gap: .8rem; grid-template-columns: repeat(auto-fill, minmax(16rem, 1fr)); margin-top: 1rem; }
    .rec { border: 1px solid var(--line); border-radius: .8rem; background: var(--panel-soft); padding: .7rem; cursor: pointer; display: grid; grid-template-columns: 5rem 1fr; gap: .7rem; }
    .poster { width: 5rem; height: 7.5rem; border-radius: .5rem; object-fit: cover; display: flex; align-items: center; justify-content: center; font-weight: 900; font-size: 1.3rem; }
    .rec h4 { margin: 0; }
    .rec-meta { font-size: .8rem; color: var(--muted); }
    .pill { display: inline-block; padding: .1rem .45rem; border-radius: 999px; background: #2b2b36; font-size: .75rem; margin: .15rem .15rem 0 0; }
    .links a { font-size: .75rem; margin-right: .5rem; color: #facc15; }
    .error { color: #f87171; }
    #detail { white-space: pre-wrap; }
  </style>
</head>
<body>
  <div class=\"container\">
    <header>
      <h1>Movie Night Agent</h1>
      <div class=\"muted\">Tell us the vibe and we will pick the movies.</div>
    </header>

    <section class=\"card\" id=\"form\">
      <label for=\"mood\">I'm in the mood for...</label>
      <select id=\"mood\">__MOOD_OPTIONS__</select>

      <label for=\"watchingWith\">Watching with...</label>
      <select id=\"watchingWith\">__WATCHING_WITH_OPTIONS__</select>

      <label for=\"availableTime\">I have about <span id=\"timeLabel\">2h</span></label>
      <input id=\"availableTime\" type=\"range\" min=\"60\" max=\"240\" step=\"15\" value=\"120\" />

      <label for=\"recentlyEnjoyed\">Something I've enjoyed lately... (optional)</label>
      <input id=\"recentlyEnjoyed\" type=\"text\" placeholder=\"e.g. Knives Out\" />

      <button id=\"submit\">Find my movies</button>
    </section>

    <section class=\"card\" id=\"progress\" hidden>
      <div class=\"progress-label\" id=\"progressLabel\">Loading...</div>
      <div class=\"dots\" id=\"dots\"></div>
    </section>

    <section class=\"card\" id=\"results\" hidden>
      <div id=\"error\" class=\"error\"></div>
      <div id=\"recommendations\" class=\"rec-grid\"></div>
      <div id=\"detail\" class=\"muted\"></div>
    </section>
  </div>

  <script>
    const $ = (id) => document.getElementById(id);

    function formatTime(mins) {
      const h = Math.floor(mins / 60);
      const m = mins % 60;
      return m ? `${h}h ${m}m` : `${h}h`;
    }

    $('availableTime').addEventListener('input', () => {
      $('timeLabel').textContent = formatTime(Number($('availableTime').value));
    });

    function renderProgress(progress) {
      if (!progress) { $('progress').hidden = true; return; }
      $('progress').hidden = false;
      $('progressLabel').textContent = progress.label;
      $('dots').innerHTML = '';
      for (let i = 0; i < progress.total; i++) {
        const d = document.createElement('div');
        d.className = 'dot' + (i < progress.index ? ' done' : '') + (i === progress.index ? ' active' : '');
        $('dots').appendChild(d);
      }
    }

    async function loadPoster(rec, el) {
      try {
        const resp = await fetch(`/api/posters/${encodeURIComponent(rec.imdbId)}?title=${encodeURIComponent(rec.title)}`);
        const data = await resp.json();
        el.style.background = data.placeholder.background;
        el.style.color = data.placeholder.foreground;
        el.textContent = data.placeholder.initials;
        if (data.posterUrl) {
          const img = document.createElement('img');
          img.className = 'poster';
          img.src = data.posterUrl;
          img.alt = rec.title;
          img.onerror = () => img.replaceWith(el);
          el.replaceWith(img);
        }
      } catch (_e) {
        el.textContent = '?';
      }
    }

    function showDetail(rec) {
      $('detail').textContent = `${rec.title} (${rec.year ?? ''})\\n\\n${rec.plot}\\n\\nWhy it fits: ${rec.whyItFits}`;
    }

    function renderRecommendations(recs) {
      $('recommendations').innerHTML = '';
      for (const rec of recs) {
        const card = document.createElement('div');
        card.className = 'rec';
        const poster = document.createElement('div');
        poster.className = 'poster';
        card.appendChild(poster);
        const body = document.createElement('div');
        const title = document.createElement('h4');
        title.textContent = rec.title;
        const meta = document.createElement('div');
        meta.className = 'rec-meta';
        meta.textContent = [rec.year, rec.runtime ? `${rec.runtime} min` : null, rec.rating ? `\\u2605 ${rec.rating}` : null].filter(Boolean).join(' \\u00b7 ');
        const why = document.createElement('p');
        why.textContent = rec.whyItFits;
        const pills = document.createElement('div');
        for (const p of (rec.streamingPlatforms || []).slice(0, 3)) {
          const s = document.createElement('span');
          s.className = 'pill';
          s.textContent = p;
          pills.appendChild(s);
        }
        const links = document.createElement('div');
        links.className = 'links';
        links.innerHTML = `<a target=\"_blank\" rel=\"noopener\" href=\"https://www.imdb.com/title/${encodeURIComponent(rec.imdbId)}/\">IMDb</a>` +
          `<a target=\"_blank\" rel=\"noopener\" href=\"https://www.rottentomatoes.com/search?search=${encodeURIComponent(rec.title)}\">RT</a>`;
        body.append(title, meta, why, pills, links);
        card.appendChild(body);
        card.addEventListener('click', () => showDetail(rec));
        $('recommendations').appendChild(card);
        loadPoster(rec, poster);
      }
    }

    async function submit() {
      $('submit').disabled = true;
      $('results').hidden = true;
      $('error').textContent = '';
      $('detail').textContent = '';

      const body = {
        mood: $('mood').value,
        watchingWith: $('watchingWith').value,
        availableTime: Number($('availableTime').value),
      };
      const recent = $('recentlyEnjoyed').value.trim();
      if (recent) body.recentlyEnjoyed = recent;

      try {
        const resp = await fetch('/api/recommend/stream', {
          method: 'POST',
          headers: {'Content-Type': 'application/json'},
          body: JSON.stringify(body),
        });
        if (!resp.ok) {
          const data = await resp.json().catch(() => ({}));
          throw new Error(data.error || `HTTP error ${resp.status}`);
        }

        const reader = resp.body.getReader();
        const decoder = new TextDecoder();
        let buffer = '';
        let last = null;
        for (;;) {
          const {value, done} = await reader.read();
          if (done) break;
          buffer += decoder.decode(value, {stream: true});
          let nl;
          while ((nl = buffer.indexOf('\\n')) !== -1) {
            const line = buffer.slice(0, nl).trim();
            buffer = buffer.slice(nl + 1);
            if (!line) continue;
            last = JSON.parse(line);
            renderProgress(last.progress);
          }
        }

        $('results').hidden = false;
        if (!last || last.currentStep === 'error') {
          $('error').textContent = (last && last.error) || 'Failed to get recommendations';
        } else {
          renderRecommendations(last.recommendations || []);
        }
      } catch (err) {
        $('results').hidden = false;
        $('error').textContent = err.message || 'Failed to get recommendations';
      } finally {
        renderProgress(null);
        $('submit').disabled = false;
      }
    }

    $('submit').addEventListener('click', submit);
  </script>
</body>
</html>
"""
    html_doc = html_doc.replace("__MOOD_OPTIONS__", _options(MOODS)).replace(
        "__WATCHING_WITH_OPTIONS__", _options(WATCHING_WITH)
    )
    return HTMLResponse(content=html_doc)
