"""브라우저 입력 페이지 (텍스트 / 음성 transcript / 웹캠 스냅샷). / 에서 그대로 반환."""

INDEX_HTML = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>Emotion Analyzer</title>
  <style>
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body {
      font-family: system-ui, -apple-system, "Segoe UI", sans-serif;
      background: linear-gradient(135deg, #0f172a, #1e293b);
      color: #e2e8f0;
      min-height: 100vh;
      padding: 48px 16px;
    }
    .container { max-width: 720px; margin: 0 auto; }
    h1 { text-align: center; font-size: 44px; margin-bottom: 8px; }
    .subtitle { text-align: center; color: #94a3b8; margin-bottom: 32px; }
    .card {
      background: rgba(30, 41, 59, 0.9);
      border: 1px solid rgba(255,255,255,0.1);
      border-radius: 16px;
      padding: 24px;
      margin-bottom: 24px;
      box-shadow: 0 8px 24px rgba(0,0,0,0.35);
    }
    .tabs { display: flex; gap: 8px; margin-bottom: 20px; }
    .tab {
      flex: 1; padding: 10px; border-radius: 10px; cursor: pointer;
      border: 1px solid rgba(255,255,255,0.2); background: transparent; color: #cbd5e1; font-size: 15px;
    }
    .tab.active { background: #6366f1; border-color: #6366f1; color: white; }
    .panel { display: none; }
    .panel.active { display: block; }
    textarea {
      width: 100%; min-height: 180px; padding: 12px; border-radius: 10px; resize: none;
      background: #0f172a; color: #e2e8f0; border: 1px solid #334155; font-size: 16px;
    }
    .btn {
      width: 100%; height: 48px; margin-top: 12px; border: none; border-radius: 10px; cursor: pointer;
      background: linear-gradient(90deg, #6366f1, #a855f7); color: white; font-size: 17px;
    }
    .btn:disabled { opacity: 0.5; cursor: not-allowed; }
    .mic {
      width: 128px; height: 128px; margin: 24px auto; border-radius: 50%;
      display: flex; align-items: center; justify-content: center; font-size: 56px;
      background: linear-gradient(135deg, #6366f1, #a855f7);
    }
    .mic.listening { background: linear-gradient(135deg, #ef4444, #dc2626); animation: pulse 1.2s infinite; }
    @keyframes pulse { 50% { opacity: 0.6; } }
    .transcript { text-align: center; font-style: italic; color: #94a3b8; min-height: 24px; }
    .video-box { position: relative; aspect-ratio: 16 / 9; background: #0f172a; border-radius: 10px; overflow: hidden; }
    video { width: 100%; height: 100%; object-fit: cover; }
    canvas { display: none; }
    .row { display: flex; gap: 8px; }
    .row .btn { flex: 1; }
    .result { display: none; text-align: center; }
    .result.show { display: block; }
    .result .emoji { font-size: 72px; }
    .result .emotion { font-size: 32px; font-weight: bold; margin: 8px 0; }
    .bar { height: 10px; background: #334155; border-radius: 6px; overflow: hidden; margin: 12px 0; }
    .bar > div { height: 100%; width: 0; transition: width 0.6s ease; }
    .explanation { color: #cbd5e1; line-height: 1.5; }
    .error { display: none; color: #fca5a5; text-align: center; margin-top: 12px; }
    .error.show { display: block; }
  </style>
</head>
<body>
  <div class="container">
    <h1>Emotion Analyzer</h1>
    <p class="subtitle">Discover emotions through text, voice, or facial expressions</p>

    <div class="card">
      <div class="tabs">
        <button type="button" class="tab active" data-mode="TEXT">Text</button>
        <button type="button" class="tab" data-mode="VOICE">Voice</button>
        <button type="button" class="tab" data-mode="WEBCAM">Webcam</button>
      </div>

      <div class="panel active" id="panel-TEXT">
        <textarea id="text-input" placeholder="Type or paste your text here..."></textarea>
        <button type="button" class="btn" id="btn-text">Analyze Emotion</button>
      </div>

      <div class="panel" id="panel-VOICE">
        <div class="mic" id="mic">🎤</div>
        <p class="transcript" id="transcript"></p>
        <button type="button" class="btn" id="btn-voice">Start Recording</button>
      </div>

      <div class="panel" id="panel-WEBCAM">
        <div class="video-box"><video id="video" autoplay playsinline muted></video></div>
        <canvas id="canvas"></canvas>
        <div class="row">
          <button type="button" class="btn" id="btn-camera">Start Camera</button>
          <button type="button" class="btn" id="btn-capture" disabled>Capture &amp; Analyze</button>
        </div>
      </div>
      <p class="error" id="error"></p>
    </div>

    <div class="card result" id="result">
      <div class="emoji" id="r-emoji"></div>
      <div class="emotion" id="r-emotion"></div>
      <div id="r-confidence"></div>
      <div class="bar"><div id="r-bar"></div></div>
      <p class="explanation" id="r-explanation"></p>
    </div>
  </div>

  <script>
    // IDLE | LISTENING | ANALYZING | SUCCESS | ERROR
    var appStatus = "IDLE";
    var PALETTE = {
      yellow: "#facc15", blue: "#60a5fa", red: "#ef4444", purple: "#c084fc", green: "#4ade80",
      orange: "#fb923c", pink: "#f472b6", gray: "#9ca3af", slate: "#94a3b8", indigo: "#818cf8",
      teal: "#2dd4bf", amber: "#fbbf24", lime: "#a3e635", cyan: "#22d3ee", emerald: "#34d399",
      violet: "#a78bfa", rose: "#fb7185", sky: "#38bdf8", fuchsia: "#e879f9", zinc: "#a1a1aa"
    };
    var SpeechRecognition = window.SpeechRecognition || window.webkitSpeechRecognition;
    var recognition = null;
    var transcript = "";
    var stream = null;

    function colorFor(token) {
      var name = String(token || "").split("-")[0];
      return PALETTE[name] || PALETTE.gray;
    }

    function setStatus(next) {
      appStatus = next;
      var busy = appStatus === "ANALYZING";
      document.getElementById("btn-text").disabled = busy;
      document.getElementById("btn-text").innerText = busy ? "Analyzing..." : "Analyze Emotion";
      document.getElementById("btn-capture").disabled = busy || !stream;
      document.getElementById("btn-voice").disabled = busy || !SpeechRecognition;
      document.getElementById("btn-voice").innerText = appStatus === "LISTENING" ? "Stop Recording" : "Start Recording";
      document.getElementById("mic").className = "mic" + (appStatus === "LISTENING" ? " listening" : "");
    }

    function showError(message) {
      var el = document.getElementById("error");
      el.innerText = message;
      el.className = "error show";
    }

    function showResult(data) {
      var pct = Math.round(Math.max(0, Math.min(1, Number(data.confidence) || 0)) * 100);
      document.getElementById("r-emoji").innerText = data.emoji || "";
      document.getElementById("r-emotion").innerText = data.emotion || "";
      document.getElementById("r-emotion").style.color = colorFor(data.color);
      document.getElementById("r-confidence").innerText = pct + "% confidence";
      var bar = document.getElementById("r-bar");
      bar.style.background = colorFor(data.color);
      bar.style.width = pct + "%";
      document.getElementById("r-explanation").innerText = data.explanation || "";
      document.getElementById("result").className = "card result show";
    }

    function analyze(mode, input) {
      setStatus("ANALYZING");
      document.getElementById("error").className = "error";
      document.getElementById("result").className = "card result";
      fetch("/api/analyze-emotion", {
        method: "POST",
        headers: { "Content-Type": "application/json" },
        body: JSON.stringify({ mode: mode, input: input })
      })
        .then(function(r) {
          return r.json().then(function(data) {
            if (!r.ok) throw new Error(data.error || ("Request failed: " + r.status));
            return data;
          });
        })
        .then(function(data) { showResult(data); setStatus("SUCCESS"); })
        .catch(function(err) {
          setStatus("ERROR");
          showError(err.message || "Failed to analyze emotion. Please try again.");
        });
    }

    document.querySelectorAll(".tab").forEach(function(tab) {
      tab.onclick = function() {
        if (appStatus === "ANALYZING" || appStatus === "LISTENING") return;
        document.querySelectorAll(".tab").forEach(function(t) { t.classList.remove("active"); });
        document.querySelectorAll(".panel").forEach(function(p) { p.classList.remove("active"); });
        tab.classList.add("active");
        document.getElementById("panel-" + tab.dataset.mode).classList.add("active");
        if (tab.dataset.mode !== "WEBCAM") stopCamera();
      };
    });

    document.getElementById("btn-text").onclick = function() {
      var text = document.getElementById("text-input").value;
      if (!text.trim()) { showError("Please enter some text to analyze."); return; }
      analyze("TEXT", text);
    };

    document.getElementById("btn-voice").onclick = function() {
      if (appStatus === "LISTENING") { recognition.stop(); return; }
      recognition = new SpeechRecognition();
      recognition.continuous = true;
      recognition.interimResults = true;
      transcript = "";
      recognition.onresult = function(event) {
        var text = "";
        for (var i = 0; i < event.results.length; i++) text += event.results[i][0].transcript;
        transcript = text;
        document.getElementById("transcript").innerText = '"' + transcript + '"';
      };
      recognition.onerror = function(event) {
        setStatus("ERROR");
        showError(event.error === "not-allowed" ? "Please allow microphone access to use this feature." : ("Speech recognition error: " + event.error));
      };
      recognition.onend = function() {
        if (appStatus !== "LISTENING") return;
        if (transcript.trim()) analyze("VOICE", transcript);
        else { setStatus("IDLE"); showError("No speech detected. Please try again."); }
      };
      document.getElementById("transcript").innerText = "";
      recognition.start();
      setStatus("LISTENING");
    };

    function stopCamera() {
      if (stream) stream.getTracks().forEach(function(t) { t.stop(); });
      stream = null;
      document.getElementById("btn-camera").innerText = "Start Camera";
      setStatus(appStatus);
    }

    document.getElementById("btn-camera").onclick = function() {
      if (stream) { stopCamera(); return; }
      navigator.mediaDevices.getUserMedia({ video: true })
        .then(function(s) {
          stream = s;
          var video = document.getElementById("video");
          video.srcObject = s;
          video.play();
          document.getElementById("btn-camera").innerText = "Stop";
          setStatus(appStatus);
        })
        .catch(function() { showError("Please allow camera access to use this feature."); });
    };

    document.getElementById("btn-capture").onclick = function() {
      var video = document.getElementById("video");
      var canvas = document.getElementById("canvas");
      canvas.width = video.videoWidth;
      canvas.height = video.videoHeight;
      canvas.getContext("2d").drawImage(video, 0, 0);
      analyze("WEBCAM", canvas.toDataURL("image/jpeg"));
    };

    setStatus("IDLE");
  </script>
</body>
</html>
"""
